"""Book API router with owner-scoped CRUD, listing and statistics."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session

from src.mylibrary.api.http.deps import get_book_repository, get_db_session
from src.mylibrary.api.http.envelope import (
    BookEnvelope,
    BookListData,
    BookListEnvelope,
    DeletedData,
    DeletedEnvelope,
    StatsEnvelope,
)
from src.mylibrary.entities.service.book import BookRepository, parse_book_query

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=BookListEnvelope)
def list_books(
    search: str | None = None,
    status: str | None = None,
    genre: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    repository: BookRepository = Depends(get_book_repository),
) -> BookListEnvelope:
    """List the caller's books, newest first."""
    query = parse_book_query(
        {"search": search, "status": status, "genre": genre, "page": page, "limit": limit}
    )
    return BookListEnvelope(data=BookListData.from_page(repository.list(query)))


@router.get("/stats", response_model=StatsEnvelope)
def get_stats(repository: BookRepository = Depends(get_book_repository)) -> StatsEnvelope:
    return StatsEnvelope(data=repository.stats())


@router.get("/{book_id}", response_model=BookEnvelope)
def get_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
) -> BookEnvelope:
    return BookEnvelope(data=repository.get(book_id))


@router.post("", response_model=BookEnvelope, status_code=201)
def create_book(
    payload: dict[str, Any] = Body(...),
    repository: BookRepository = Depends(get_book_repository),
    session: Session = Depends(get_db_session),
) -> BookEnvelope:
    """Create a book owned by the caller."""
    book = repository.create(payload)
    session.commit()
    return BookEnvelope(message="Book created", data=book)


@router.put("/{book_id}", response_model=BookEnvelope)
def update_book(
    book_id: str,
    payload: dict[str, Any] = Body(...),
    repository: BookRepository = Depends(get_book_repository),
    session: Session = Depends(get_db_session),
) -> BookEnvelope:
    """Partially update a book; only the supplied fields change."""
    book = repository.update(book_id, payload)
    session.commit()
    return BookEnvelope(message="Book updated", data=book)


@router.delete("/{book_id}", response_model=DeletedEnvelope)
def delete_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
    session: Session = Depends(get_db_session),
) -> DeletedEnvelope:
    repository.delete(book_id)
    session.commit()
    return DeletedEnvelope(message="Book deleted", data=DeletedData(id=book_id))
