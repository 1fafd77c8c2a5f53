from amduplicates.core.models import SortKey

SORT_KEY_ALIASES = {
    "name": SortKey.NAME,
    "kind": SortKey.KIND,
    "date": SortKey.DATE,
    "modified": SortKey.DATE,
    "size": SortKey.SIZE,
    "digest": SortKey.DIGEST,
    "hash": SortKey.DIGEST,
}

SORT_KEY_CHOICES = list(SORT_KEY_ALIASES.keys())

SORT_KEY_HELP_TEXT = "Order of listed files (default: name):\n" + "".join(
    f"  {', '.join(a for a, k in SORT_KEY_ALIASES.items() if k is key):<16}: {key.display_name}\n"
    for key in SortKey
)

EPILOG_TEXT = (
    "Examples:\n"
    "  %(prog)s ~/Pictures\n"
    "  %(prog)s ~/Pictures /media/backup/Pictures --sort size --descending\n"
    "  %(prog)s ~/Downloads --keep-one\n"
    "\n"
    "Files are compared by SHA-256 of their full content. Hidden files and\n"
    "symbolic links are skipped unless --include-hidden / --follow-symlinks is given.\n"
    "--keep-one moves files to the system trash, never erases them.\n"
)
