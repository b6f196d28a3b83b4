"""Fetch -> normalize -> aggregate -> publish, for one run."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from aggregate import bucket_small, group_and_count
from brevo_client import fetch_all_contacts
from config import Settings
from errors import FetchError, PipelineError, SerializationError
from json_sink import write_output_document
from models import Contact, CountItem, OutputDocument
from normalize import (
    BIRTH_DATE_ATTRIBUTE,
    COURSE_ATTRIBUTE,
    INSTITUTION_ATTRIBUTE,
    extract_birth_year,
    list_membership_labels,
    normalize_course_name,
    normalize_institution_name,
)

LOGGER = logging.getLogger(__name__)

BUCKET_THRESHOLD = 5
BUCKET_LABEL = "Altro (k<5)"


def build_datasets(contacts: list[Contact]) -> dict[str, list[CountItem]]:
    """Derive the four public datasets from the fetched contacts.

    Institutions and courses are bucketed so that groups smaller than
    BUCKET_THRESHOLD never appear under their own label. List memberships and
    birth years are published as counted.
    """
    per_list = group_and_count(
        (label for contact in contacts for label in list_membership_labels(contact)),
        lambda label: label,
    )

    institutions = bucket_small(
        group_and_count(contacts, lambda c: normalize_institution_name(c.attributes.get(INSTITUTION_ATTRIBUTE))),
        BUCKET_THRESHOLD,
        BUCKET_LABEL,
    )

    courses = bucket_small(
        group_and_count(contacts, lambda c: normalize_course_name(c.attributes.get(COURSE_ATTRIBUTE))),
        BUCKET_THRESHOLD,
        BUCKET_LABEL,
    )

    def _birth_year_label(contact: Contact) -> str | None:
        year = extract_birth_year(contact.attributes.get(BIRTH_DATE_ATTRIBUTE))
        return str(year) if year is not None else None

    birth_years = group_and_count(contacts, _birth_year_label)

    return {
        "per_lista_ids": per_list,
        "distribuzione_atenei": institutions,
        "distribuzione_corsi": courses,
        "distribuzione_anno_nascita": birth_years,
    }


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PipelineRunner:
    """Runs the datasets pipeline against the CRM described by ``settings``."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def run(self, dry_run: bool = False) -> OutputDocument:
        """Run one full pipeline cycle and publish the artifact.

        Raises PipelineError on any fetch, aggregation or write failure; in that
        case nothing is written and the previous artifact stays in place.
        """
        LOGGER.info("Downloading contacts from %s", self.settings.api_base)
        try:
            contacts = fetch_all_contacts(
                self.settings.api_key,
                api_base=self.settings.api_base,
                page_size=self.settings.page_size,
                timeout=self.settings.request_timeout,
            )
        except FetchError as exc:
            raise PipelineError(f"Contact download failed: {exc}") from exc

        try:
            datasets = build_datasets(contacts)
        except ValueError as exc:
            raise PipelineError(f"Dataset construction failed: {exc}") from exc

        document = OutputDocument(
            generated_at=_utc_timestamp(),
            total_contacts=len(contacts),
            datasets=datasets,
        )
        LOGGER.info(
            "Aggregated contacts=%s lists=%s institutions=%s courses=%s birth_years=%s",
            document.total_contacts,
            len(datasets["per_lista_ids"]),
            len(datasets["distribuzione_atenei"]),
            len(datasets["distribuzione_corsi"]),
            len(datasets["distribuzione_anno_nascita"]),
        )

        if dry_run:
            LOGGER.info("[dry-run] Would write %s", self.settings.output_path)
            return document

        try:
            write_output_document(document, self.settings.output_path)
        except SerializationError as exc:
            raise PipelineError(f"Artifact write failed: {exc}") from exc
        return document
