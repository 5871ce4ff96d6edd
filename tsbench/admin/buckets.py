"""
Minimal client for the bucket administration endpoints of the target store.
Only the fields the benchmark needs are read out of the listing; everything
else the server returns is ignored.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

import jsonschema
import requests

from tsbench import settings
from tsbench.utils.serializable_exception import SerializableException

logger = logging.getLogger("tsbench.admin.buckets")

BUCKETS_PATH = "/api/v2/buckets"

BUCKET_LISTING_SCHEMA = {
    "type": "object",
    "properties": {
        "buckets": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "id": {"type": "string"},
                    "type": {"type": "string"},
                },
                "required": ["name", "id"],
            },
        },
    },
    "required": ["buckets"],
}


class BucketAdminError(SerializableException):
    """A bucket administration request failed."""


@dataclass(frozen=True)
class BucketInfo:
    name: str
    id: str
    type: str = "user"


class BucketClient:
    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        org: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = (url or settings.INFLUX_URL).rstrip("/")
        self.__token = token if token is not None else settings.INFLUX_TOKEN
        self.org = org if org is not None else settings.INFLUX_ORG
        self.__session = session or requests.Session()

    @property
    def headers(self) -> Mapping[str, str]:
        return {"Authorization": f"Token {self.__token}"}

    def __request(
        self, method: str, path: str, **kwargs: Any
    ) -> requests.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            return self.__session.request(
                method,
                f"{self.url}{path}",
                headers=headers,
                timeout=settings.BUCKET_REQUEST_TIMEOUT,
                **kwargs,
            )
        except requests.RequestException as error:
            raise BucketAdminError(
                f"{method} {path} failed: {error}", url=self.url
            ) from error

    def list_buckets(self) -> Sequence[BucketInfo]:
        """Every bucket that is not a system bucket."""
        response = self.__request("GET", BUCKETS_PATH)
        if response.status_code != 200:
            raise BucketAdminError(
                f"list buckets returned non-200 code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            listing = response.json()
            jsonschema.validate(listing, BUCKET_LISTING_SCHEMA)
        except (ValueError, jsonschema.ValidationError) as error:
            raise BucketAdminError(f"cannot read bucket listing: {error}") from error

        return [
            BucketInfo(
                name=bucket["name"], id=bucket["id"], type=bucket.get("type", "user")
            )
            for bucket in listing["buckets"]
            if bucket.get("type") != "system"
        ]

    def get_bucket(self, name: str) -> Optional[BucketInfo]:
        for bucket in self.list_buckets():
            if bucket.name == name:
                return bucket
        return None

    def bucket_exists(self, name: str) -> bool:
        return self.get_bucket(name) is not None

    def create_bucket(self, name: str) -> None:
        response = self.__request(
            "POST",
            BUCKETS_PATH,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            json={
                "name": name,
                "orgID": self.org,
                "type": "user",
                "retentionRules": [],
                "description": settings.BUCKET_DESCRIPTION,
            },
        )
        if response.status_code != 201:
            raise BucketAdminError(
                f"bad bucket create, returned code: {response.status_code}",
                bucket=name,
                status_code=response.status_code,
            )

        logger.info("Created bucket %s", name)
        time.sleep(settings.BUCKET_SETTLE_SECONDS)

    def remove_bucket(self, name: str) -> bool:
        """
        Delete the bucket called ``name``. Returns False when there was no
        such bucket to delete.
        """
        bucket = self.get_bucket(name)
        if bucket is None:
            return False

        response = self.__request("DELETE", f"{BUCKETS_PATH}/{bucket.id}")
        if response.status_code != 204:
            raise BucketAdminError(
                f"drop bucket returned non-204 code: {response.status_code}",
                bucket=name,
                status_code=response.status_code,
            )

        logger.info("Removed bucket %s (%s)", name, bucket.id)
        time.sleep(settings.BUCKET_SETTLE_SECONDS)
        return True
