"""Pytest fixtures and configuration."""

import itertools
import threading

import pytest

from timeside_importer.core.importing.errors import RemoteError
from timeside_importer.core.importing.models import (Collection, InputRecord,
                                                     Item, Job, JobStatus,
                                                     Pipeline)
from timeside_importer.core.utils import config as config_module

PRESETS = [
    '/timeside/api/presets/aaaa/',
    '/timeside/api/presets/bbbb/',
    '/timeside/api/presets/cccc/',
]

PROVIDERS = {
    'youtube.com': '/timeside/api/providers/youtube/',
    'deezer.com': '/timeside/api/providers/deezer/',
}

WRITE_CALLS = {
    'create_collection', 'create_pipeline', 'update_pipeline',
    'create_item', 'append_to_collection', 'create_job',
}


class FakeRemoteClient:
    """
    In-memory RemoteClient recording every call.

    Job statuses are scripted per item title: each retrieve pops the next
    entry of the script, the last entry is repeated. An entry may be an
    exception instance, which is raised instead.
    """

    def __init__(self, collections=(), pipelines=()):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.calls = []
        self.collections = list(collections)
        self.pipelines = list(pipelines)
        self.items = {}
        self.jobs = {}
        self.job_titles = {}
        self.status_scripts = {}
        self.default_script = [JobStatus.DONE]
        self.fail_create_item = set()
        self.fail_create_collection = None
        self.fail_create_pipeline = None
        self.fail_update_pipeline = None
        self.before_create_item = None

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name, args))

    def _new_id(self, kind):
        with self._lock:
            return f"{kind}-{next(self._ids)}"

    def call_names(self):
        return [name for name, _ in self.calls]

    def write_calls(self):
        return [name for name, _ in self.calls if name in WRITE_CALLS]

    # Selections

    def list_collections(self):
        self._record('list_collections')
        return list(self.collections)

    def create_collection(self, title):
        self._record('create_collection', title)
        if self.fail_create_collection is not None:
            raise RemoteError("rejected", status=400, body=self.fail_create_collection)
        collection = Collection(uuid=self._new_id('selection'), title=title)
        self.collections.append(collection)
        return collection

    def append_to_collection(self, collection_uuid, item_ref):
        self._record('append_to_collection', collection_uuid, item_ref)
        with self._lock:
            for index, collection in enumerate(self.collections):
                if collection.uuid == collection_uuid:
                    updated = Collection(collection.uuid, collection.title, collection.items + (item_ref,))
                    self.collections[index] = updated
                    return updated
        raise RemoteError("not found", status=404, body={'detail': 'Not found.'})

    # Experiences

    def list_pipelines(self):
        self._record('list_pipelines')
        return list(self.pipelines)

    def create_pipeline(self, title, presets):
        self._record('create_pipeline', title, tuple(presets))
        if self.fail_create_pipeline is not None:
            raise RemoteError("rejected", status=400, body=self.fail_create_pipeline)
        pipeline = Pipeline(uuid=self._new_id('experience'), title=title, presets=tuple(presets))
        self.pipelines.append(pipeline)
        return pipeline

    def update_pipeline(self, pipeline_uuid, title, presets):
        self._record('update_pipeline', pipeline_uuid, title, tuple(presets))
        if self.fail_update_pipeline is not None:
            raise RemoteError("rejected", status=400, body=self.fail_update_pipeline)
        for index, pipeline in enumerate(self.pipelines):
            if pipeline.uuid == pipeline_uuid:
                updated = Pipeline(pipeline.uuid, title, tuple(presets))
                self.pipelines[index] = updated
                return updated
        raise RemoteError("not found", status=404, body={'detail': 'Not found.'})

    # Items

    def create_item(self, title, description, source):
        self._record('create_item', title, description, source)
        if self.before_create_item is not None:
            self.before_create_item(title)
        if title in self.fail_create_item:
            raise RemoteError("rejected", status=400, body={'title': ['invalid']})
        item = Item(uuid=self._new_id('item'), title=title, description=description)
        with self._lock:
            self.items[item.uuid] = item
        return item

    # Tasks

    def create_job(self, pipeline_ref, collection_ref, item_ref, status=JobStatus.PENDING):
        self._record('create_job', pipeline_ref, collection_ref, item_ref, status)
        job = Job(uuid=self._new_id('task'), status=status, pipeline=pipeline_ref,
                  collection=collection_ref, item=item_ref)
        item_uuid = item_ref.rstrip('/').rsplit('/', 1)[-1]
        with self._lock:
            self.jobs[job.uuid] = job
            self.job_titles[job.uuid] = self.items[item_uuid].title
        return job

    def retrieve_job(self, job_uuid):
        self._record('retrieve_job', job_uuid)
        if job_uuid not in self.jobs:
            raise RemoteError("not found", status=404, body={'detail': 'Not found.'})
        with self._lock:
            title = self.job_titles[job_uuid]
            script = self.status_scripts.setdefault(title, list(self.default_script))
            entry = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(entry, Exception):
            raise entry
        job = self.jobs[job_uuid]
        return Job(job.uuid, JobStatus(entry), job.pipeline, job.collection, job.item)


class FakeClock:
    """Monotonic clock advanced by the recorded sleeps."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_record(title='Song', url='https://www.youtube.com/watch?v=abc', name='Radio', album='Album'):
    return InputRecord(title=title, url=url, name=name, album_title=album)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep user config files and TimeSide variables out of the tests."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setattr(config_module, 'get_default_config_path', lambda: config_dir / 'importer.yaml')
    for var in ('TIMESIDE_API_URL', 'TIMESIDE_API_USER', 'TIMESIDE_API_PASS'):
        monkeypatch.delenv(var, raising=False)
    return config_dir


@pytest.fixture
def fake_client():
    return FakeRemoteClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def presets():
    return list(PRESETS)


@pytest.fixture
def providers():
    return dict(PROVIDERS)
