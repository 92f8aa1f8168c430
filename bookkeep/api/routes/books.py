from fastapi import APIRouter, Depends, Path, Request, Response
from sqlalchemy.orm import Session
from bookkeep.core.errors import ErrorResponse, NotFoundError
from bookkeep.core.logging import get_logger
from bookkeep.db.session import get_db
from bookkeep.services.book_service import BookService
from bookkeep.services.cover_service import CoverImageLookup, get_cover_lookup
from bookkeep.schemas.book import BookPayload, BookRead
from bookkeep.validators.book import ensure_valid_book
from typing import Annotated
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
)
router = APIRouter(prefix="/books", tags=["books"])

# Ids are signed 64-bit integers in the store
MAX_BOOK_ID = 2**63 - 1

BookId = Annotated[int, Path(ge=0, le=MAX_BOOK_ID, description="Book ID")]

_ERRORS: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    404: {"model": ErrorResponse, "description": "Book not found"},
    409: {"model": ErrorResponse, "description": "Duplicate Guid or ISBN"},
}


@router.get(
    "/{book_id}",
    response_model=BookRead,
    responses={400: _ERRORS[400], 404: _ERRORS[404]},
)
def get_book(
    request: Request,
    book_id: BookId,
    db: Annotated[Session, Depends(get_db)],
):
    logger = get_logger(__name__, request)
    logger.info("Attempting to get book with ID: %s", book_id)
    book = BookService.get_book(db, book_id)
    if book is None:
        logger.warning("Book with ID: %s not found.", book_id)
        raise NotFoundError(f"Book with Id '{book_id}' not found.")
    return book


@router.get("", response_model=list[BookRead])
def list_books(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    logger = get_logger(__name__, request)
    books = BookService.list_books(db)
    logger.info("Retrieved %d books", len(books))
    return books


@router.post(
    "",
    response_model=BookRead,
    status_code=HTTP_201_CREATED,
    responses={400: _ERRORS[400], 409: _ERRORS[409]},
)
def create_book(
    request: Request,
    response: Response,
    data: BookPayload,
    db: Annotated[Session, Depends(get_db)],
    covers: Annotated[CoverImageLookup, Depends(get_cover_lookup)],
):
    logger = get_logger(__name__, request)
    ensure_valid_book(data)
    logger.info("Attempting to create a new book with title: %s", data.title)
    book = BookService.create_book(db, data, covers)
    response.headers["Location"] = str(request.url_for("get_book", book_id=book.id))
    logger.info("Successfully created book with ID: %s", book.id)
    return book


@router.put(
    "/{book_id}",
    response_model=BookRead,
    responses={400: _ERRORS[400], 404: _ERRORS[404], 409: _ERRORS[409]},
)
def update_book(
    request: Request,
    book_id: BookId,
    data: BookPayload,
    db: Annotated[Session, Depends(get_db)],
    covers: Annotated[CoverImageLookup, Depends(get_cover_lookup)],
):
    logger = get_logger(__name__, request)
    ensure_valid_book(data)
    logger.info("Attempting to update book with ID: %s", book_id)
    return BookService.update_book(db, book_id, data, covers)


@router.delete(
    "/{book_id}",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: _ERRORS[400], 404: _ERRORS[404]},
)
def delete_book(
    request: Request,
    book_id: BookId,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    logger = get_logger(__name__, request)
    _ = BookService.delete_book(db, book_id)
    logger.info("Marked book with ID: %s as inactive.", book_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
