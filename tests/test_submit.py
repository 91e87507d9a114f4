from dataclasses import replace

import pytest

from timeside_importer.core.importing.errors import (RemoteError,
                                                     SourceResolutionError,
                                                     ValidationError)
from timeside_importer.core.importing.models import (Collection,
                                                     ExternalProviderURI,
                                                     JobStatus, LocalFile,
                                                     Pipeline)
from timeside_importer.core.importing.submit import ItemSubmitter

from conftest import FakeRemoteClient, make_record

COLLECTION = Collection(uuid='sel-1', title='WASABI')
PIPELINE = Pipeline(uuid='exp-1', title='WASABI_experience')


@pytest.fixture
def fake_client():
    return FakeRemoteClient(collections=[COLLECTION], pipelines=[PIPELINE])


@pytest.fixture
def submitter(fake_client, providers, tmp_path):
    return ItemSubmitter(fake_client, base_dir=tmp_path, providers=providers)


@pytest.mark.parametrize("attribute, field_name", [
    ('title', 'title'),
    ('url', 'url'),
    ('name', 'name'),
    ('album_title', 'albumTitle'),
])
def test_empty_field_is_rejected_without_remote_call(submitter, fake_client, attribute, field_name):
    record = replace(make_record(), **{attribute: ''})

    with pytest.raises(ValidationError) as exc_info:
        submitter.submit(record, COLLECTION, PIPELINE)

    assert exc_info.value.field == field_name
    assert f"Empty {field_name}" in str(exc_info.value)
    assert fake_client.calls == []


def test_submit_creates_item_then_appends_then_creates_job(submitter, fake_client, providers):
    record = make_record(title='Hey Jude', name='The Beatles', album='Hey Jude')

    submission = submitter.submit(record, COLLECTION, PIPELINE)

    assert fake_client.call_names() == ['create_item', 'append_to_collection', 'create_job']

    _, (title, description, source) = fake_client.calls[0]
    assert title == 'Hey Jude'
    assert description == 'Music from The Beatles - Hey Jude'
    assert source == ExternalProviderURI(uri=record.url, provider=providers['youtube.com'])

    item_ref = f"/timeside/api/items/{submission.item.uuid}/"
    assert fake_client.calls[1] == ('append_to_collection', ('sel-1', item_ref))
    assert fake_client.calls[2] == ('create_job', (
        '/timeside/api/experiences/exp-1/',
        '/timeside/api/selections/sel-1/',
        item_ref,
        JobStatus.PENDING,
    ))
    assert submission.job.status == JobStatus.PENDING


def test_append_only_adds_the_new_item(submitter, fake_client):
    fake_client.collections[0] = Collection('sel-1', 'WASABI', ('/timeside/api/items/old/',))

    submission = submitter.submit(make_record(), COLLECTION, PIPELINE)

    assert fake_client.collections[0].items == (
        '/timeside/api/items/old/',
        f"/timeside/api/items/{submission.item.uuid}/",
    )


def test_local_file_source(submitter, fake_client, tmp_path):
    (tmp_path / 'song.wav').write_bytes(b'RIFF')

    submitter.submit(make_record(url='song.wav'), COLLECTION, PIPELINE)

    _, (_, _, source) = fake_client.calls[0]
    assert source == LocalFile(path=tmp_path / 'song.wav')


def test_missing_local_file_is_rejected_before_any_write(submitter, fake_client):
    with pytest.raises(SourceResolutionError):
        submitter.submit(make_record(url='missing.wav'), COLLECTION, PIPELINE)

    assert fake_client.calls == []


def test_rejected_item_stops_the_submission(submitter, fake_client):
    fake_client.fail_create_item.add('Song')

    with pytest.raises(RemoteError):
        submitter.submit(make_record(title='Song'), COLLECTION, PIPELINE)

    assert fake_client.call_names() == ['create_item']


def test_custom_api_prefix_is_used_for_references(fake_client, providers):
    submitter = ItemSubmitter(fake_client, providers=providers, api_prefix='/api/')

    submission = submitter.submit(make_record(), COLLECTION, PIPELINE)

    assert fake_client.calls[1] == ('append_to_collection', ('sel-1', f"/api/items/{submission.item.uuid}/"))


def test_unknown_collection_stops_before_the_job(submitter, fake_client):
    with pytest.raises(RemoteError) as exc_info:
        submitter.submit(make_record(), Collection(uuid='sel-gone', title='WASABI'), PIPELINE)

    assert exc_info.value.status == 404
    assert fake_client.call_names() == ['create_item', 'append_to_collection']
