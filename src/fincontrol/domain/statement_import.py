"""Statement import service: turns OFX/CSV statements into split transactions."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain import errors
from fincontrol.domain.category import CategoryService
from fincontrol.domain.csv_statement import parse_csv
from fincontrol.domain.duplicates import DuplicateDetector, DuplicateMatch
from fincontrol.domain.format_detection import detect_format
from fincontrol.domain.import_config import DuplicateStrategy, ImportConfiguration, StatementFormat
from fincontrol.domain.lookup import normalize_name
from fincontrol.domain.mapping import MappingError, MappingResolver, ResolvedEntry
from fincontrol.domain.ofx_statement import parse_ofx
from fincontrol.domain.statement import (
    ImportedEntry,
    ImportIssueType,
    ImportResult,
    ParseResult,
    to_imported_entry,
)
from fincontrol.domain.transaction import TransactionService
from fincontrol.utils.user_resolver import resolve_current_user

logger = logging.getLogger(__name__)


class StatementImportService:
    """Service for importing bank and card statements."""

    def __init__(self, db: Database):
        """Initialize statement import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.category_service = CategoryService(db)
        self.transaction_service = TransactionService(db)

    def import_file(self, path: str | Path, config: ImportConfiguration) -> ImportResult:
        """Import a statement file from disk.

        The file name is used as a format hint when ``config.format`` is AUTO.

        Raises:
            ImportRejectedError: If the file cannot be read or the import is rejected
            ImportCommitError: If persisting the import failed
        """
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise errors.ImportRejectedError(f"Unable to read statement file '{path}': {e}") from e
        return self.import_statement(content, config, filename=path.name)

    def import_statement(
        self,
        content: bytes,
        config: ImportConfiguration,
        filename: Optional[str] = None,
    ) -> ImportResult:
        """Import a statement.

        The request is validated before anything is parsed. Per-entry problems
        are reported as issues in the result; only request-level problems,
        unreadable files and duplicates under the FAIL strategy abort the import.
        Every write of one call is committed together at the end.

        Args:
            content: Raw statement bytes
            config: Import configuration; ``user_id`` defaults to the current user
            filename: Original file name, used as a format hint

        Returns:
            ImportResult summary

        Raises:
            ImportRejectedError: If the request is invalid or the file cannot be parsed
            DuplicateImportError: If a duplicate is found under the FAIL strategy
            ImportCommitError: If persisting the import failed; nothing is kept
        """
        config = self._with_user(config)
        config.validate()
        self._check_responsibles(config)

        statement_format = detect_format(content, config.format, filename)
        config.validate_for(statement_format)
        parsed = self._parse(content, statement_format, config)

        result = ImportResult(
            dry_run=config.dry_run,
            total_entries=parsed.total_records,
            format=statement_format,
        )
        result.issues.extend(parsed.issues)

        resolver = MappingResolver(config, self.category_service)
        detector = DuplicateDetector(self.db, config.user_id)
        ignored = [normalize_name(d) for d in config.ignore_descriptions if d and d.strip()]

        try:
            with self.db.unit_of_work():
                for statement_entry in parsed.entries:
                    entry = to_imported_entry(statement_entry)
                    if _is_ignored(entry, ignored):
                        result.ignored_entries += 1
                        continue
                    self._process_entry(entry, config, resolver, detector, result)
        except errors.ImportRejectedError as e:
            logger.warning("Statement import rejected and rolled back: %s", e)
            raise
        except Exception as e:
            logger.warning("Statement import failed and was rolled back: %s", e)
            raise errors.ImportCommitError(f"Failed to save imported transactions: {e}") from e

        logger.info(
            "Imported %s statement: %d entries, %d processed, %d created, %d duplicates, "
            "%d ignored, %d issues%s",
            result.format.value,
            result.total_entries,
            result.processed_entries,
            result.created_transactions,
            result.duplicate_entries,
            result.ignored_entries,
            len(result.issues),
            " (dry run)" if result.dry_run else "",
        )
        return result

    def _with_user(self, config: ImportConfiguration) -> ImportConfiguration:
        if config.user_id is not None:
            return config
        try:
            user_id = resolve_current_user()
        except errors.ValidationError as e:
            raise errors.ImportRejectedError(str(e)) from e
        return replace(config, user_id=user_id)

    def _check_responsibles(self, config: ImportConfiguration) -> None:
        for allocation in config.responsibilities:
            responsible = self.db.get_responsible(allocation.responsible_id)
            if responsible is None or responsible.user_id != config.user_id:
                raise errors.ImportRejectedError(
                    errors.responsible_not_found(allocation.responsible_id)
                )

    def _parse(
        self, content: bytes, statement_format: StatementFormat, config: ImportConfiguration
    ) -> ParseResult:
        if statement_format == StatementFormat.OFX:
            return parse_ofx(content, config.resolve_timezone())
        return parse_csv(content, config.csv)

    def _process_entry(
        self,
        entry: ImportedEntry,
        config: ImportConfiguration,
        resolver: MappingResolver,
        detector: DuplicateDetector,
        result: ImportResult,
    ) -> None:
        try:
            resolved = resolver.resolve(entry)
        except MappingError as e:
            result.add_issue(entry, str(e), e.issue_type)
            return

        result.processed_entries += 1

        match = detector.find(resolved)
        if match is not None:
            result.duplicate_entries += 1
            self._handle_duplicate(entry, resolved, match, config, detector, result)
            return

        detector.remember(resolved)
        if config.dry_run:
            return

        transaction_id = self.transaction_service.create_transaction(
            user_id=config.user_id,
            description=resolved.description,
            date=resolved.date,
            amount=resolved.amount,
            type=resolved.type,
            subtype=resolved.subtype,
            source=resolved.source,
            category_id=resolved.category_id,
            responsibilities=config.responsibilities,
            subcategory_id=resolved.subcategory_id,
            source_entity_id=resolved.source_entity_id,
            external_reference=resolved.external_id,
        )
        result.created_transactions += 1
        result.created_transaction_summaries.append(
            self.transaction_service.get_transaction(transaction_id)
        )

    def _handle_duplicate(
        self,
        entry: ImportedEntry,
        resolved: ResolvedEntry,
        match: DuplicateMatch,
        config: ImportConfiguration,
        detector: DuplicateDetector,
        result: ImportResult,
    ) -> None:
        if config.duplicate_strategy == DuplicateStrategy.FAIL:
            raise errors.DuplicateImportError(
                errors.duplicate_entry(entry.line_number, match.reference)
            )

        if config.duplicate_strategy == DuplicateStrategy.OVERWRITE and match.existing is not None:
            if not config.dry_run:
                self.transaction_service.update_transaction(
                    match.existing.id,
                    description=resolved.description,
                    date=resolved.date,
                    amount=resolved.amount,
                    type=resolved.type,
                    subtype=resolved.subtype,
                    source=resolved.source,
                    category_id=resolved.category_id,
                    subcategory_id=resolved.subcategory_id,
                    source_entity_id=resolved.source_entity_id,
                    responsibilities=config.responsibilities,
                )
            detector.remember(resolved)
            result.overwritten_transactions += 1
            result.add_issue(
                entry,
                f"Duplicate of transaction {match.existing.id} overwritten",
                ImportIssueType.DUPLICATE_OVERWRITTEN,
            )
            return

        result.add_issue(
            entry,
            f"Duplicate entry '{match.reference}' skipped",
            ImportIssueType.DUPLICATE_SKIPPED,
        )


def _is_ignored(entry: ImportedEntry, ignored: list[str]) -> bool:
    if not ignored or not entry.description:
        return False
    description = normalize_name(entry.description)
    return any(pattern in description for pattern in ignored)
