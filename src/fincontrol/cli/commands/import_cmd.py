"""Statement import command."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.parsing import enum_value, optional_enum, parse_allocation, parse_mappings
from fincontrol.cli.user_resolution import resolve_user_or_exit, user_option
from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType
from fincontrol.domain.errors import DomainError
from fincontrol.domain.import_config import (
    DEFAULT_DATE_PATTERNS,
    CsvConfiguration,
    DuplicateStrategy,
    ImportConfiguration,
    StatementFormat,
)
from fincontrol.domain.statement import ImportResult
from fincontrol.domain.statement_import import StatementImportService

TYPE_CHOICES = [t.value.lower() for t in TransactionType]
SUBTYPE_CHOICES = [s.value.lower() for s in TransactionSubtype]
SOURCE_CHOICES = [s.value.lower() for s in TransactionSource]


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--responsible",
    "responsibles",
    multiple=True,
    required=True,
    help="Split applied to every transaction, as ID:PERCENT[:NOTES]; repeat per party",
)
@click.option("--default-category", type=int, help="Category ID used when no mapping matches")
@click.option("--default-subcategory", type=int, help="Subcategory ID used when no mapping matches")
@click.option("--default-source-entity", type=int, help="Source entity ID used when no mapping matches")
@click.option("--default-type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.option("--default-subtype", type=click.Choice(SUBTYPE_CHOICES, case_sensitive=False), default="variable", show_default=True)
@click.option("--default-source", type=click.Choice(SOURCE_CHOICES, case_sensitive=False), default="other", show_default=True)
@click.option("--format", "statement_format", type=click.Choice(["auto", "ofx", "csv"], case_sensitive=False), default="auto", show_default=True)
@click.option("--duplicates", type=click.Choice(["skip", "overwrite", "fail"], case_sensitive=False), default="skip", show_default=True, help="What to do with already imported entries")
@click.option("--dry-run", is_flag=True, help="Validate and report without saving anything")
@click.option("--timezone", help="IANA time zone for OFX dates (default: system zone)")
@click.option("--category-map", multiple=True, help="CODE=CATEGORY_ID; repeatable")
@click.option("--subcategory-map", multiple=True, help="CODE=SUBCATEGORY_ID; repeatable")
@click.option("--source-entity-map", multiple=True, help="CODE=SOURCE_ENTITY_ID; repeatable")
@click.option("--type-map", multiple=True, help="CODE=INCOME|EXPENSE; repeatable")
@click.option("--subtype-map", multiple=True, help="CODE=FIXED|VARIABLE; repeatable")
@click.option("--source-map", multiple=True, help="CODE=SOURCE; repeatable")
@click.option("--ignore", "ignored", multiple=True, help="Skip entries whose description contains TEXT; repeatable")
@click.option("--delimiter", default=";", show_default=True, help="CSV field delimiter")
@click.option("--locale", "locale_tag", default="pt-BR", show_default=True, help="Locale for CSV number formats")
@click.option("--decimal-separator", help="CSV decimal separator (overrides locale)")
@click.option("--grouping-separator", help="CSV thousands separator (overrides locale)")
@click.option("--date-pattern", "date_patterns", multiple=True, help="strptime pattern for CSV dates; repeatable, tried in order")
@click.option("--encoding", default="utf-8", show_default=True, help="CSV file encoding")
@click.option("--date-column", default="date", show_default=True)
@click.option("--description-column", default="description", show_default=True)
@click.option("--amount-column", default="amount", show_default=True)
@click.option("--type-column")
@click.option("--subtype-column")
@click.option("--source-column")
@click.option("--category-column")
@click.option("--subcategory-column")
@click.option("--source-entity-column")
@click.option("--external-id-column")
@user_option
@click.pass_context
def import_statement(ctx, statement_file: str, responsibles: tuple[str, ...], user: str | None, **options):
    """Import transactions from an OFX or CSV statement.

    Examples:
        fincontrol import extrato.ofx --default-category 3 --responsible 1:100
        fincontrol import fatura.csv --category-map mercado=3 --responsible 1:60 --responsible 2:40 --dry-run
    """
    user_id = resolve_user_or_exit(ctx, user)

    try:
        config = _build_configuration(user_id, responsibles, options)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    service = StatementImportService(ctx.obj["db"])
    try:
        result = service.import_file(statement_file, config)
    except DomainError as e:
        handle_domain_error(ctx, e)

    _print_result(result)


def _build_configuration(user_id: int, responsibles: tuple[str, ...], options: dict) -> ImportConfiguration:
    csv_config = CsvConfiguration(
        delimiter=options["delimiter"],
        decimal_separator=options["decimal_separator"],
        grouping_separator=options["grouping_separator"],
        date_column=options["date_column"],
        description_column=options["description_column"],
        amount_column=options["amount_column"],
        type_column=options["type_column"],
        subtype_column=options["subtype_column"],
        source_column=options["source_column"],
        category_column=options["category_column"],
        subcategory_column=options["subcategory_column"],
        source_entity_column=options["source_entity_column"],
        external_id_column=options["external_id_column"],
        date_patterns=tuple(options["date_patterns"]) or DEFAULT_DATE_PATTERNS,
        locale=options["locale_tag"],
        encoding=options["encoding"],
    )
    return ImportConfiguration(
        user_id=user_id,
        default_subtype=TransactionSubtype[options["default_subtype"].upper()],
        default_source=TransactionSource[options["default_source"].upper()],
        responsibilities=tuple(parse_allocation(r) for r in responsibles),
        default_category_id=options["default_category"],
        default_subcategory_id=options["default_subcategory"],
        default_source_entity_id=options["default_source_entity"],
        default_type=optional_enum(TransactionType, options["default_type"]),
        format=StatementFormat[options["statement_format"].upper()],
        duplicate_strategy=DuplicateStrategy[options["duplicates"].upper()],
        dry_run=options["dry_run"],
        timezone=options["timezone"],
        csv=csv_config,
        category_mappings=parse_mappings(options["category_map"], int),
        subcategory_mappings=parse_mappings(options["subcategory_map"], int),
        source_entity_mappings=parse_mappings(options["source_entity_map"], int),
        type_mappings=parse_mappings(options["type_map"], enum_value(TransactionType)),
        subtype_mappings=parse_mappings(options["subtype_map"], enum_value(TransactionSubtype)),
        source_mappings=parse_mappings(options["source_map"], enum_value(TransactionSource)),
        ignore_descriptions=tuple(options["ignored"]),
    )


def _print_result(result: ImportResult) -> None:
    title = "Dry run complete (nothing saved)" if result.dry_run else "Import complete"
    click.echo(f"\n{title}:")
    click.echo(f"  Format: {result.format.value}")
    click.echo(f"  Entries: {result.total_entries}")
    click.echo(f"  Processed: {result.processed_entries}")
    click.echo(f"  Created: {result.created_transactions} transactions")
    click.echo(f"  Duplicates: {result.duplicate_entries}")
    if result.overwritten_transactions:
        click.echo(f"  Overwritten: {result.overwritten_transactions}")
    if result.ignored_entries:
        click.echo(f"  Ignored: {result.ignored_entries}")
    if result.issues:
        click.echo(f"  Issues: {len(result.issues)}")
        for issue in result.issues:
            click.echo(
                f"    Line {issue.line_number} [{issue.issue_type.value}]: {issue.message}",
                err=True,
            )


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
