"""
Seed script — creates the books table if needed and loads sample books for demo.
Run: python -m bookshelf.seed
"""

from __future__ import annotations

from bookshelf.config import get_settings
from bookshelf.database import get_dynamodb
from bookshelf.schemas.book import BookRecord
from bookshelf.services import book_store

SAMPLE_BOOKS = [
    {
        "id": 1,
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "price": 10.99,
        "description": "A story of the mysteriously wealthy Jay Gatsby and his love for Daisy Buchanan.",
        "rating": 4.0,
        "reviewCount": 4210,
        "pages": 180,
        "genre": "Fiction",
        "isbn": "978-0743273565",
        "publisher": "Scribner",
        "publishedDate": "1925-04-10",
    },
    {
        "id": 2,
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "price": 12.49,
        "description": "The unforgettable novel of a childhood in a sleepy Southern town.",
        "rating": 4.8,
        "reviewCount": 5320,
        "pages": 336,
        "genre": "Fiction",
        "isbn": "978-0061120084",
        "publisher": "Harper Perennial",
        "publishedDate": "1960-07-11",
    },
    {
        "id": 3,
        "title": "Dune",
        "author": "Frank Herbert",
        "price": 9.99,
        "description": "Set on the desert planet Arrakis, the story of the boy Paul Atreides.",
        "rating": 4.6,
        "reviewCount": 3870,
        "pages": 688,
        "genre": "Science Fiction",
        "isbn": "978-0441172719",
        "publisher": "Ace",
        "publishedDate": "1965-08-01",
    },
    {
        "id": 4,
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "price": 8.99,
        "description": "Bilbo Baggins is swept into a quest to reclaim a treasure guarded by a dragon.",
        "rating": 4.7,
        "reviewCount": 6120,
        "pages": 310,
        "genre": "Fantasy",
        "isbn": "978-0547928227",
        "publisher": "Houghton Mifflin",
        "publishedDate": "1937-09-21",
    },
    {
        "id": 5,
        "title": "Gone Girl",
        "author": "Gillian Flynn",
        "price": 11.5,
        "description": "A marriage gone terribly wrong, told from both sides.",
        "rating": 4.1,
        "reviewCount": 2980,
        "pages": 432,
        "genre": "Thriller",
        "isbn": "978-0307588371",
        "publisher": "Crown",
        "publishedDate": "2012-06-05",
    },
    {
        "id": 6,
        "title": "The Hound of the Baskervilles",
        "author": "Arthur Conan Doyle",
        "price": 0,
        "description": "Sherlock Holmes investigates the legend of a supernatural hound.",
        "rating": 4.3,
        "pages": 256,
        "genre": "Mystery",
        "isbn": "978-0451528018",
        "publishedDate": "1902",
    },
    {
        "id": 7,
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "price": 7.99,
        "description": "The turbulent relationship between Elizabeth Bennet and Mr. Darcy.",
        "rating": 4.5,
        "reviewCount": 4400,
        "pages": 279,
        "genre": "Romance",
        "isbn": "978-0141439518",
        "publisher": "Penguin Classics",
        "publishedDate": "1813-01-28",
    },
    {
        "id": 8,
        "title": "Steve Jobs",
        "author": "Walter Isaacson",
        "price": 18.0,
        "description": "The exclusive biography of the Apple co-founder.",
        "rating": 4.4,
        "reviewCount": 1900,
        "pages": 656,
        "genre": "Biography",
        "isbn": "978-1451648539",
        "publisher": "Simon & Schuster",
        "publishedDate": "2011-10-24",
    },
    {
        "id": 9,
        "title": "Sapiens",
        "author": "Yuval Noah Harari",
        "price": 16.99,
        "description": "A brief history of humankind.",
        "rating": 4.4,
        "reviewCount": 3550,
        "pages": 464,
        "genre": "History",
        "isbn": "978-0062316097",
        "publisher": "Harper",
        "publishedDate": "2015-02-10",
    },
    {
        "id": 10,
        "title": "A Brief History of Time",
        "author": "Stephen Hawking",
        "price": 14.0,
        "description": "From the Big Bang to black holes.",
        "rating": 4.2,
        "pages": 212,
        "genre": "Science",
        "isbn": "978-0553380163",
        "publishedDate": "1988",
    },
    {
        "id": 11,
        "title": "Atomic Habits",
        "author": "James Clear",
        "price": 13.75,
        "description": "An easy and proven way to build good habits and break bad ones.",
        "rating": 4.6,
        "reviewCount": 5100,
        "pages": 320,
        "genre": "Self-Help",
        "isbn": "978-0735211292",
        "publisher": "Avery",
        "publishedDate": "2018-10-16",
    },
    {
        "id": 12,
        "title": "The Lean Startup",
        "author": "Eric Ries",
        "price": 15.2,
        "description": "How constant innovation creates radically successful businesses.",
        "rating": 4.0,
        "reviewCount": 1200,
        "pages": 336,
        "genre": "Business",
        "isbn": "978-0307887894",
        "publisher": "Crown Business",
    },
]


def seed() -> None:
    """Seed the books table with sample data."""
    settings = get_settings()
    table = book_store.ensure_table(get_dynamodb(), settings.books_table_name)

    if book_store.list_books(table):
        print("Books table already seeded. Skipping.")
        return

    for entry in SAMPLE_BOOKS:
        book_store.put_book(table, BookRecord.model_validate(entry))
    print(f"Created {len(SAMPLE_BOOKS)} books")
    print("Seeding complete!")


if __name__ == "__main__":
    seed()
