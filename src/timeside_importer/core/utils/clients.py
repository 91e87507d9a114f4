# -*- coding: utf-8 -*-
"""
TimeSide API client.

The importer components only depend on the `RemoteClient` protocol; the
`TimesideClient` implementation talks to the TimeSide REST API with a
`requests.Session`. A client is created once per run and handed explicitly to
every component.
"""

import os
import logging
from typing import List, Optional, Protocol, Sequence

import requests
from requests.adapters import HTTPAdapter
from tenacity import (retry, retry_if_exception_type, stop_after_attempt,
                      wait_exponential)
from urllib3.util.retry import Retry

from ..importing.errors import RemoteError, RemoteTransportError
from ..importing.models import (DEFAULT_API_PREFIX, Collection, Item, Job,
                                JobStatus, LocalFile, Pipeline)

DEFAULT_API_URL = 'https://sandbox.wasabi.telemeta.org'
DEFAULT_TIMEOUT = 30


retry_on_transient_remote_errors = retry(
    retry=retry_if_exception_type(RemoteTransportError),
    wait=wait_exponential(min=1, max=30),
    stop=stop_after_attempt(5),
    reraise=True
)


class RemoteClient(Protocol):
    """Operations the importer needs from the processing platform."""

    def list_collections(self) -> List[Collection]: ...

    def create_collection(self, title: str) -> Collection: ...

    def append_to_collection(self, collection_uuid: str, item_ref: str) -> Collection: ...

    def list_pipelines(self) -> List[Pipeline]: ...

    def create_pipeline(self, title: str, presets: Sequence[str]) -> Pipeline: ...

    def update_pipeline(self, pipeline_uuid: str, title: str, presets: Sequence[str]) -> Pipeline: ...

    def create_item(self, title: str, description: str, source) -> Item: ...

    def create_job(self, pipeline_ref: str, collection_ref: str, item_ref: str,
                   status: JobStatus = JobStatus.PENDING) -> Job: ...

    def retrieve_job(self, job_uuid: str) -> Job: ...


def requests_retry_session(retries=3, backoff_factor=0.5, session=None):
    """
    Session retrying connection failures only.

    Requests that reached the server are never replayed here, item and task
    creation are not idempotent.
    """
    session = session or requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=0,
        status=0,
        backoff_factor=backoff_factor,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class TimesideClient:
    """RemoteClient implementation for the TimeSide REST API."""

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.api_prefix = '/' + api_prefix.strip('/')
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = session or requests_retry_session()
        self.session.headers.setdefault('Accept', 'application/json')

    def _url(self, path: str) -> str:
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}{self.api_prefix}/{path.lstrip('/')}"

    @staticmethod
    def _decode_body(response):
        try:
            return response.json()
        except ValueError:
            return response.text

    def _request(self, method: str, path: str, **kwargs):
        url = self._url(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteTransportError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 500:
            raise RemoteTransportError(
                f"{method} {url} returned {response.status_code}",
                status=response.status_code,
                body=self._decode_body(response)
            )
        if response.status_code >= 400:
            raise RemoteError(
                f"{method} {url} returned {response.status_code}",
                status=response.status_code,
                body=self._decode_body(response)
            )
        if response.status_code == 204 or not response.content:
            return None
        return self._decode_body(response)

    def _request_object(self, method: str, path: str, **kwargs) -> dict:
        """Same as _request for endpoints answering with a single JSON object."""
        data = self._request(method, path, **kwargs)
        if not isinstance(data, dict):
            # Truncated or proxied answers (HTML error pages) on a 2xx status
            raise RemoteTransportError(
                f"{method} {self._url(path)} returned an unexpected body",
                body=data
            )
        return data

    def _list(self, path: str) -> list:
        """GET a collection endpoint, following DRF pagination when enabled."""
        results = []
        url = path
        while url:
            page = self._request('GET', url)
            if isinstance(page, dict) and 'results' in page:
                results.extend(page['results'])
                url = page.get('next')
            else:
                results.extend(page or [])
                url = None
        return results

    def authenticate(self):
        """
        Obtain a JWT access token and use it for every following request.

        Raises:
            ValueError: If no credentials were given.
            RemoteError: If the server rejects the credentials.
        """
        if not self.username or not self.password:
            raise ValueError("TimeSide username and password are required to authenticate.")
        token = self._request_object('POST', 'token/', json={
            'username': self.username,
            'password': self.password
        })
        access = token.get('access')
        if not access:
            raise RemoteError("Unexpected empty access token", body=token)
        self.session.headers['Authorization'] = f"Bearer {access}"
        logging.info(f"Authenticated on {self.base_url} as {self.username}")

    # Selections

    @retry_on_transient_remote_errors
    def list_collections(self) -> List[Collection]:
        return [Collection.from_api(data) for data in self._list('selections/')]

    def create_collection(self, title: str) -> Collection:
        return Collection.from_api(self._request_object('POST', 'selections/', json={'title': title}))

    def append_to_collection(self, collection_uuid: str, item_ref: str) -> Collection:
        data = self._request_object('PATCH', f'selections/{collection_uuid}/', json={'items': [item_ref]})
        return Collection.from_api(data)

    # Experiences

    @retry_on_transient_remote_errors
    def list_pipelines(self) -> List[Pipeline]:
        return [Pipeline.from_api(data) for data in self._list('experiences/')]

    def create_pipeline(self, title: str, presets: Sequence[str]) -> Pipeline:
        data = self._request_object('POST', 'experiences/', json={'title': title, 'presets': list(presets)})
        return Pipeline.from_api(data)

    def update_pipeline(self, pipeline_uuid: str, title: str, presets: Sequence[str]) -> Pipeline:
        data = self._request_object('PUT', f'experiences/{pipeline_uuid}/', json={
            'title': title,
            'presets': list(presets)
        })
        return Pipeline.from_api(data)

    # Items

    def create_item(self, title: str, description: str, source) -> Item:
        if isinstance(source, LocalFile):
            with source.open() as fh:
                data = self._request_object(
                    'POST', 'items/',
                    data={'title': title, 'description': description},
                    files={'source_file': (source.path.name, fh)}
                )
        else:
            body = {'title': title, 'description': description}
            body.update(source.payload())
            data = self._request_object('POST', 'items/', json=body)
        return Item.from_api(data)

    # Tasks

    def create_job(self, pipeline_ref: str, collection_ref: str, item_ref: str,
                   status: JobStatus = JobStatus.PENDING) -> Job:
        data = self._request_object('POST', 'tasks/', json={
            'experience': pipeline_ref,
            'selection': collection_ref,
            'item': item_ref,
            'status': int(status)
        })
        return Job.from_api(data)

    def retrieve_job(self, job_uuid: str) -> Job:
        return Job.from_api(self._request_object('GET', f'tasks/{job_uuid}/'))


def create_timeside_client(
        api_url=None,
        username=None,
        password=None,
        api_prefix=DEFAULT_API_PREFIX,
        timeout=DEFAULT_TIMEOUT,
        authenticate=True
    ):
    """
    Create an authenticated TimeSide client.

    Args:
        api_url (str): Server base URL. Defaults to $TIMESIDE_API_URL, then the WASABI sandbox.
        username (str): API user. Defaults to $TIMESIDE_API_USER.
        password (str): API password. Defaults to $TIMESIDE_API_PASS.
        api_prefix (str): Path of the API root on the server.
        timeout (float): Per-request timeout in seconds.
        authenticate (bool): Obtain the access token right away.
    """
    if api_url is None:
        api_url = os.getenv('TIMESIDE_API_URL') or DEFAULT_API_URL
    if username is None:
        username = os.getenv('TIMESIDE_API_USER')
    if username is None:
        raise ValueError("No TimeSide API user provided or found in environment.")
    if password is None:
        password = os.getenv('TIMESIDE_API_PASS')
    if password is None:
        raise ValueError("No TimeSide API password provided or found in environment.")

    client = TimesideClient(
        api_url,
        username=username,
        password=password,
        api_prefix=api_prefix,
        timeout=timeout
    )
    if authenticate:
        client.authenticate()
    logging.info("TimeSide client created successfully.")
    return client
