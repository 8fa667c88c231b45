"""Product reviews and rating aggregation."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models import Review
from storefront.schemas.reviews import ProductRating, ReviewOut, ReviewUpdate


def review_to_out(review: Review) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        product_id=review.product_id,
        user_id=review.user_id,
        username=review.user.username if review.user else None,
        text=review.text,
        rating=review.rating,
        created_at=review.created_at,
    )


def list_product_reviews(
    session: Session, product_id: int, page: int, limit: int
) -> tuple[list[Review], int]:
    query = session.query(Review).filter(Review.product_id == product_id)
    total = query.count()
    reviews = (
        query.order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return reviews, total


def product_rating(session: Session, product_id: int) -> ProductRating:
    """Average rating (None when unreviewed) and review count for a product."""
    average, total = (
        session.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.product_id == product_id)
        .one()
    )
    return ProductRating(
        product_id=product_id,
        average_rating=round(float(average), 2) if average is not None else None,
        total_reviews=int(total or 0),
    )


def create_review(session: Session, product_id: int, user_id: int, text: str, rating: int) -> Review:
    review = Review(product_id=product_id, user_id=user_id, text=text.strip(), rating=rating)
    session.add(review)
    session.commit()
    session.refresh(review)
    return review


def update_review(session: Session, review: Review, body: ReviewUpdate) -> Review:
    if body.text is not None:
        review.text = body.text.strip()
    if body.rating is not None:
        review.rating = body.rating
    session.commit()
    session.refresh(review)
    return review


def delete_review(session: Session, review: Review) -> None:
    session.delete(review)
    session.commit()
