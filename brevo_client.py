"""Brevo contacts API: paginated retrieval with per-page retry."""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any

import requests

from config import DEFAULT_API_BASE, DEFAULT_PAGE_SIZE, DEFAULT_REQUEST_TIMEOUT_SECONDS
from errors import FetchError
from models import Contact
from normalize import AGGREGATE_ATTRIBUTES

MAX_RETRIES = 5
BACKOFF_BASE_SECONDS = 0.3
# Brevo answers with "contacts"; some list endpoints use "items".
RECORD_KEYS = ("contacts", "items")

LOGGER = logging.getLogger(__name__)


def fetch_all_contacts(
    api_key: str,
    *,
    api_base: str = DEFAULT_API_BASE,
    page_size: int = DEFAULT_PAGE_SIZE,
    timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
) -> list[Contact]:
    """Download every contact, one page at a time.

    The offset advances by the size of each page received. Retrieval stops at
    the first empty page (or a body without any record key). Any failure that
    survives the per-page retries raises FetchError and nothing is returned.
    """
    url = f"{api_base.rstrip('/')}/contacts"
    headers = {"api-key": api_key, "accept": "application/json"}
    contacts: list[Contact] = []
    offset = 0
    page = 0

    while True:
        params = {"limit": page_size, "offset": offset}
        body = _get_page_with_backoff(url=url, headers=headers, params=params, timeout=timeout)
        chunk = _parse_contacts_payload(body)
        if not chunk:
            break

        page += 1
        contacts.extend(chunk)
        offset += len(chunk)
        LOGGER.info("Fetched page=%s size=%s total=%s", page, len(chunk), len(contacts))

    LOGGER.info("Contacts download complete: pages=%s total=%s", page, len(contacts))
    return contacts


def _get_page_with_backoff(
    *,
    url: str,
    headers: dict[str, str],
    params: dict[str, int],
    timeout: int,
) -> Any:
    """Request one page, retrying rate limits and server errors with linear backoff."""
    attempt = 0
    while True:
        attempt += 1
        try:
            response = requests.get(url, headers=headers, params=params, timeout=timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            if attempt > MAX_RETRIES:
                raise FetchError(
                    f"Request to {url} offset={params['offset']} failed after {MAX_RETRIES} retries: {exc}",
                    transient=True,
                ) from exc
            _wait_before_retry(attempt, str(exc))
            continue
        except requests.RequestException as exc:
            raise FetchError(f"Request to {url} offset={params['offset']} failed: {exc}") from exc

        status = response.status_code
        if status == 429 or status >= 500:
            if attempt > MAX_RETRIES:
                raise FetchError(
                    f"HTTP {status} on {url} offset={params['offset']} after {MAX_RETRIES} retries\n{response.text}",
                    status_code=status,
                    transient=True,
                )
            _wait_before_retry(attempt, f"HTTP {status}")
            continue

        if not response.ok:
            raise FetchError(
                f"HTTP {status} on {url} offset={params['offset']}\n{response.text}",
                status_code=status,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Malformed JSON from {url} offset={params['offset']}: {exc}") from exc


def _wait_before_retry(attempt: int, reason: str) -> None:
    delay = attempt * BACKOFF_BASE_SECONDS
    LOGGER.warning("Retry %s/%s (%s) after %.1fs", attempt, MAX_RETRIES, reason, delay)
    time.sleep(delay)


def _parse_contacts_payload(payload: Any) -> list[Contact]:
    """Turn one page body into Contacts, dropping every non-aggregate attribute."""
    if not isinstance(payload, dict):
        raise FetchError("Unexpected contacts payload shape: expected a JSON object")

    records = None
    for key in RECORD_KEYS:
        if payload.get(key) is not None:
            records = payload[key]
            break
    if records is None:
        return []
    if not isinstance(records, list):
        raise FetchError(f"Unexpected contacts payload shape: {key!r} is not a list")

    parsed: list[Contact] = []
    for item in records:
        if not isinstance(item, dict):
            raise FetchError("Unexpected contacts payload shape: record is not an object")
        parsed.append(_to_contact(item))
    return parsed


def _to_contact(item: dict[str, Any]) -> Contact:
    raw_attributes = item.get("attributes") if isinstance(item.get("attributes"), dict) else {}
    attributes = {
        name: value
        for name, value in raw_attributes.items()
        if name in AGGREGATE_ATTRIBUTES
    }
    list_ids = item.get("listIds") if isinstance(item.get("listIds"), list) else []
    return Contact(attributes=MappingProxyType(attributes), list_ids=tuple(list_ids))
