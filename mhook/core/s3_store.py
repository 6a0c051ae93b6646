"""S3-compatible object store backend (AWS S3, MinIO, SeaweedFS)."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from typing import BinaryIO

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from mhook.core.errors import (
    MhookError,
    NotModified,
    ObjectNotFound,
    TransferFailed,
    WaitTimeout,
)
from mhook.core.freshness import normalize_etag
from mhook.core.store import ProgressCallback
from mhook.models.transfer import RemoteObject

logger = logging.getLogger(__name__)

# Largest single PUT S3 accepts.  Staying below it keeps ETags equal to the
# MD5 of the content, which the freshness check relies on.
DEFAULT_MULTIPART_THRESHOLD = 5 * 1024**3

_DOWNLOAD_CHUNK_SIZE = 256 * 1024

_ERROR_CODE_MAP: dict[str, type[MhookError]] = {
    "NoSuchKey": ObjectNotFound,
    "NotFound": ObjectNotFound,
    "404": ObjectNotFound,
}

_NOT_MODIFIED_CODES = frozenset({"304", "NotModified"})


class S3ObjectStore:
    """``ObjectStore`` implementation on top of a boto3 S3 client.

    Parameters
    ----------
    bucket_name:
        Bucket holding the MUFL tree.
    region:
        AWS region of the bucket.
    endpoint_url:
        Custom endpoint for S3-compatible services.
    max_retries:
        Transport-level retry budget handed to botocore.  Retries are logged
        by botocore at DEBUG level.
    multipart_threshold:
        Uploads larger than this are split into parts.
    wait_delay:
        Seconds between existence checks in ``wait_exists``.
    client:
        Pre-built boto3 S3 client; one is created from the other settings
        when omitted.
    """

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        *,
        max_retries: int = 10,
        multipart_threshold: int = DEFAULT_MULTIPART_THRESHOLD,
        wait_delay: float = 5.0,
        client=None,
    ) -> None:
        self._bucket = bucket_name
        self._wait_delay = wait_delay
        self._transfer_config = TransferConfig(multipart_threshold=multipart_threshold)

        if client is None:
            kwargs: dict = {
                "config": Config(
                    region_name=region,
                    signature_version="s3v4",
                    retries={"max_attempts": max_retries, "mode": "standard"},
                ),
            }
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)
        self._client = client

    @property
    def bucket(self) -> str:
        return self._bucket

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        if_none_match: str | None = None,
        callback: ProgressCallback | None = None,
    ) -> int:
        params: dict = {"Bucket": self._bucket, "Key": key}
        if if_none_match:
            params["IfNoneMatch"] = if_none_match
        try:
            response = self._client.get_object(**params)
        except ClientError as e:
            if _is_not_modified(e):
                raise NotModified(key) from e
            raise self._translate_error(e, key) from e
        except BotoCoreError as e:
            raise TransferFailed(f"GET {key} failed: {e}", key=key) from e

        body = response["Body"]
        written = 0
        try:
            for chunk in body.iter_chunks(chunk_size=_DOWNLOAD_CHUNK_SIZE):
                fileobj.write(chunk)
                written += len(chunk)
                if callback is not None:
                    callback(len(chunk))
        except (BotoCoreError, ClientError) as e:
            raise TransferFailed(
                f"GET {key} failed after {written} bytes: {e}", key=key
            ) from e
        finally:
            body.close()
        return written

    def head(self, key: str) -> RemoteObject:
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            raise self._translate_error(e, key) from e
        except BotoCoreError as e:
            raise TransferFailed(f"HEAD {key} failed: {e}", key=key) from e
        return RemoteObject(
            key=key,
            size=response.get("ContentLength", 0),
            etag=normalize_etag(response.get("ETag")),
        )

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        """Yield objects page by page; later pages are fetched lazily."""
        paginator = self._client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    yield RemoteObject(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        etag=normalize_etag(obj.get("ETag")),
                    )
        except ClientError as e:
            raise self._translate_error(e, prefix) from e
        except BotoCoreError as e:
            raise TransferFailed(f"LIST {prefix} failed: {e}", key=prefix) from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(
        self,
        key: str,
        body: bytes | BinaryIO,
        *,
        callback: ProgressCallback | None = None,
    ) -> None:
        try:
            if isinstance(body, bytes):
                self._client.put_object(Bucket=self._bucket, Key=key, Body=body)
                if callback is not None:
                    callback(len(body))
            else:
                self._client.upload_fileobj(
                    body,
                    self._bucket,
                    key,
                    Callback=callback,
                    Config=self._transfer_config,
                )
        except ClientError as e:
            raise self._translate_error(e, key) from e
        except (BotoCoreError, S3UploadFailedError) as e:
            raise TransferFailed(f"PUT {key} failed: {e}", key=key) from e

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def wait_exists(self, key: str, timeout: float) -> None:
        """Block on the ``object_exists`` waiter until ``key`` is visible.

        The waiter sleeps only between attempts, so ``attempts`` is one more
        than the number of delays that fit into ``timeout``.
        """
        delay = max(0.1, min(self._wait_delay, timeout))
        attempts = math.floor(timeout / delay) + 1
        waiter = self._client.get_waiter("object_exists")
        logger.debug(
            "Waiting for s3://%s/%s (delay=%.1fs, attempts=%d).",
            self._bucket,
            key,
            delay,
            attempts,
        )
        try:
            waiter.wait(
                Bucket=self._bucket,
                Key=key,
                WaiterConfig={"Delay": delay, "MaxAttempts": attempts},
            )
        except WaiterError as e:
            raise WaitTimeout(
                f"Timed out after {timeout:g}s waiting for {key}", key=key
            ) from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _translate_error(self, error: ClientError, key: str | None = None) -> MhookError:
        code = error.response.get("Error", {}).get("Code", "")
        exc_cls = _ERROR_CODE_MAP.get(code, TransferFailed)
        return exc_cls(str(error), key=key)


def _is_not_modified(error: ClientError) -> bool:
    code = error.response.get("Error", {}).get("Code", "")
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in _NOT_MODIFIED_CODES or status == 304
