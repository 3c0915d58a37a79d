#!/usr/bin/env python3
"""
Catalog Management Utility

Books are created out-of-band; this script is that path:
- List all books
- Show one book with its reviews
- Add a single book
- Import books from a JSON file
- Show catalog statistics
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import List

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError

from bookstore.catalog import CatalogStore
from bookstore.database import MongoDBManager
from bookstore.errors import DuplicateBook, NotFound
from bookstore.models import BookCreate
from utilities.config import BookstoreConfig, load_config
from utilities.logger import setup_logging

USAGE = """Usage: python manage_catalog.py [list|show|add|import|stats] [args]

Commands:
  list                          - List all books
  show <isbn>                   - Show one book and its reviews
  add <isbn> <title> <author>   - Add a book
  import <file.json>            - Import a JSON array of books
  stats                         - Show catalog statistics

Examples:
  python manage_catalog.py add 123 "The Hobbit" "J.R.R. Tolkien"
  python manage_catalog.py import books.json
"""


def load_books_file(path: Path) -> List[BookCreate]:
    """Read a JSON array of {isbn, title, author} objects."""
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError("book file must contain a JSON array")
    return [BookCreate(**entry) for entry in raw]


async def list_books(catalog: CatalogStore):
    """List all books in the catalog."""
    books = await catalog.list_all()
    if not books:
        print("❌ No books found in catalog")
        return

    print(f"✅ Found {len(books)} books:")
    for i, book in enumerate(books, 1):
        print(f"{i:3d}. {book.isbn}  {book.title} by {book.author} ({len(book.reviews)} reviews)")


async def show_book(catalog: CatalogStore, isbn: str):
    """Show one book and its reviews."""
    try:
        book = await catalog.find_by_isbn(isbn)
    except NotFound:
        print(f"❌ No book with ISBN {isbn}")
        return

    print(f"ISBN:   {book.isbn}")
    print(f"Title:  {book.title}")
    print(f"Author: {book.author}")
    print(f"Reviews ({len(book.reviews)}):")
    for review in book.reviews:
        print(f"  - [{review.user}] {review.review}")


async def add_book(catalog: CatalogStore, isbn: str, title: str, author: str):
    """Add a single book."""
    try:
        await catalog.add_book(BookCreate(isbn=isbn, title=title, author=author))
        print(f"✅ Added {isbn}")
    except DuplicateBook as e:
        print(f"❌ {e.message}")


async def import_books(catalog: CatalogStore, path: Path):
    """Import books from a JSON file."""
    books = load_books_file(path)
    result = await catalog.import_books(books)
    print(f"✅ Imported {result['inserted']} books, skipped {result['duplicates']} existing")


async def show_statistics(catalog: CatalogStore):
    """Show catalog statistics."""
    books = await catalog.list_all()
    review_count = sum(len(book.reviews) for book in books)
    authors = {book.author for book in books}

    print(f"📚 Total Books: {len(books)}")
    print(f"✍️  Distinct Authors: {len(authors)}")
    print(f"💬 Total Reviews: {review_count}")


async def run_command(config: BookstoreConfig, command: str, args: List[str]) -> int:
    """Connect, dispatch one command and disconnect. Returns the exit code."""
    db_manager = MongoDBManager(config)
    await db_manager.connect()
    catalog = CatalogStore(db_manager.books)

    try:
        if command == "list":
            await list_books(catalog)
        elif command == "show" and len(args) == 1:
            await show_book(catalog, args[0])
        elif command == "add" and len(args) == 3:
            await add_book(catalog, *args)
        elif command == "import" and len(args) == 1:
            await import_books(catalog, Path(args[0]))
        elif command == "stats":
            await show_statistics(catalog)
        else:
            print(USAGE)
            return 1
    except (ValidationError, ValueError, OSError) as e:
        print(f"❌ {e}")
        return 1
    finally:
        await db_manager.disconnect()

    return 0


def main() -> int:
    """Main function."""
    if len(sys.argv) < 2:
        print(USAGE)
        return 1

    config = load_config()
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    return asyncio.run(run_command(config, sys.argv[1].lower(), sys.argv[2:]))


if __name__ == "__main__":
    sys.exit(main())
