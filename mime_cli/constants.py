"""CLI constants."""

PROGRAM_NAME = "mime"

COMMAND_ALIASES = {
    "uninstall": "delete",
    "-h": "help",
    "--help": "help",
}

LIST_CATEGORIES = ("entity", "relation")

USAGE_TEXT = """Usage: {prog} [--debug] <operation> [mime-type]
where operation is one of:

install     installs MIME type in MIME db (from a resource file or by name)
uninstall   uninstalls MIME type from MIME db (alias: delete)
list        lists entities and relations in MIME db, or one supertype
help        shows this help"""
