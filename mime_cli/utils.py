"""Formatting helpers for CLI output."""

from mime_common.types import ImportReport, IndexOutcome, IndexStatus, TypeRecord


def format_file_size(size_bytes: int) -> str:
    """
    Format a size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based).

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 KiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_type_record(record: TypeRecord) -> str:
    """Render one installed type record as an indented block."""
    lines = [f"  - {record.identifier}"]
    if record.short_description is not None:
        lines.append(f"    Description: {record.short_description}")
    if record.long_description is not None:
        lines.append(f"    Long description: {record.long_description}")
    if record.preferred_app is not None:
        lines.append(f"    Preferred app: {record.preferred_app}")
    if record.sniffer_rule is not None:
        lines.append(f"    Sniffer rule: {record.sniffer_rule}")
    if record.extensions:
        lines.append(f"    Extensions: {', '.join(record.extensions)}")
    if record.attributes:
        lines.append("    Attributes:")
        for attr in record.attributes:
            flags = ""
            if attr.searchable:
                flags = " [indexed]"
            lines.append(f"      {attr.name} ({attr.type.value}) \"{attr.public_name}\"{flags}")
    if record.icon:
        lines.append(f"    Icon: {format_file_size(len(record.icon))}")
    return '\n'.join(lines)


def format_type_list(category: str, records: list[TypeRecord]) -> str:
    if not records:
        return f"installed {category} types: none"
    output = [f"installed {category} types ({len(records)}):"]
    output.extend(format_type_record(record) for record in records)
    return '\n'.join(output)


def format_index_outcome(outcome: IndexOutcome, volume: str) -> str:
    if outcome.status is IndexStatus.FAILED:
        return f"warning: could not {outcome.action.value} index {outcome.attribute} on {volume}: {outcome.detail}"
    if outcome.status in (IndexStatus.ALREADY_EXISTS, IndexStatus.NOT_FOUND):
        return f"index {outcome.attribute} on {volume}: {outcome.status.value}, nothing to do"
    return f"index {outcome.attribute} on {volume}: {outcome.status.value}"


def format_import_report(report: ImportReport) -> str:
    record = report.record
    verb = "installed" if report.newly_installed else "updated"
    lines = [f"successfully {verb} MIME type {record.identifier} from {report.source_path}."]
    if report.fields_set:
        lines.append(f"  fields set: {', '.join(report.fields_set)}")
    return '\n'.join(lines)
