from collections.abc import Callable
from datetime import UTC, datetime, timedelta
import uuid

from fakes import InMemoryMovieRatingRepository, InMemoryMovieRepository
from freezegun import freeze_time
import pytest
import pytest_asyncio

from movie_rating.domain.commands import CreateRatingCommand, SearchRatingsCommand, UpdateRatingCommand
from movie_rating.domain.movie import Movie
from movie_rating.domain.movie_rating import MovieRating
from movie_rating.exceptions.movie import MovieNotFoundException, UnauthorizedMovieOperationException
from movie_rating.exceptions.rating import DuplicateRatingException, MovieRatingNotFoundException
from movie_rating.exceptions.validation import ValidationException
from movie_rating.services.rating import ManageMovieRatingService

ALICE = uuid.uuid4()
BOB = uuid.uuid4()
CAROL = uuid.uuid4()


@pytest.fixture
def service(
    rating_repository: InMemoryMovieRatingRepository, movie_repository: InMemoryMovieRepository
) -> ManageMovieRatingService:
    return ManageMovieRatingService(rating_repository, movie_repository)


@pytest_asyncio.fixture
async def movie(movie_repository: InMemoryMovieRepository, make_movie: Callable[..., Movie]) -> Movie:
    return await movie_repository.save(make_movie())


async def _rate(
    service: ManageMovieRatingService, movie_id: uuid.UUID, user_id: uuid.UUID, rating: int, review: str | None = None
) -> MovieRating:
    return await service.create_rating(
        CreateRatingCommand(movie_id=movie_id, user_id=user_id, rating=rating, review=review)
    )


######################### TESTS create_rating ########################


@pytest.mark.asyncio
async def test_create_rating_success(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 8, "Mind-bending")

    assert rating.rating == 8
    assert rating.review == "Mind-bending"
    assert rating.rating_summary == "8/10 (Good)"
    assert rating.is_active is True


@pytest.mark.asyncio
async def test_create_rating_unknown_movie(service: ManageMovieRatingService) -> None:
    with pytest.raises(MovieNotFoundException):
        await _rate(service, uuid.uuid4(), ALICE, 8)


@pytest.mark.asyncio
async def test_create_rating_twice(service: ManageMovieRatingService, movie: Movie) -> None:
    await _rate(service, movie.id, ALICE, 8)

    with pytest.raises(DuplicateRatingException) as exc:
        await _rate(service, movie.id, ALICE, 9)

    assert exc.value.status_code == 409
    assert exc.value.detail == f"User {ALICE} has already rated movie {movie.id}"


@pytest.mark.asyncio
async def test_create_rating_after_deleting_previous(service: ManageMovieRatingService, movie: Movie) -> None:
    first = await _rate(service, movie.id, ALICE, 3)
    await service.delete_rating(first.id, ALICE)

    second = await _rate(service, movie.id, ALICE, 9)

    assert second.id != first.id
    assert (await service.get_user_rating_for_movie(movie.id, ALICE)) == second


@pytest.mark.asyncio
@pytest.mark.parametrize("score", [0, 11])
async def test_create_rating_out_of_range(service: ManageMovieRatingService, movie: Movie, score: int) -> None:
    with pytest.raises(ValidationException) as exc:
        await _rate(service, movie.id, ALICE, score)

    assert exc.value.errors["rating"] == "Rating must be between 1 and 10"


######################### TESTS get_rating_by_id ########################


@pytest.mark.asyncio
async def test_get_rating_by_id_not_found(service: ManageMovieRatingService) -> None:
    with pytest.raises(MovieRatingNotFoundException) as exc:
        await service.get_rating_by_id(uuid.uuid4())

    assert exc.value.status_code == 404


######################### TESTS update_rating / delete_rating ########################


@pytest.mark.asyncio
async def test_update_rating_partial(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 6, "Okay")

    updated = await service.update_rating(UpdateRatingCommand(rating_id=rating.id, user_id=ALICE, rating=9))

    assert updated.rating == 9
    assert updated.review == "Okay"


@pytest.mark.asyncio
async def test_update_rating_not_author(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 6)

    with pytest.raises(UnauthorizedMovieOperationException) as exc:
        await service.update_rating(UpdateRatingCommand(rating_id=rating.id, user_id=BOB, rating=1))

    assert exc.value.status_code == 403
    assert (await service.get_rating_by_id(rating.id)) == rating


@pytest.mark.asyncio
async def test_update_rating_invalid_score(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 6)

    with pytest.raises(ValidationException):
        await service.update_rating(UpdateRatingCommand(rating_id=rating.id, user_id=ALICE, rating=15))


@pytest.mark.asyncio
async def test_delete_rating(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 6)

    with pytest.raises(UnauthorizedMovieOperationException):
        await service.delete_rating(rating.id, BOB)
    await service.delete_rating(rating.id, ALICE)

    assert (await service.get_rating_by_id(rating.id)).is_active is False
    assert await service.has_user_rated_movie(movie.id, ALICE) is False
    assert await service.get_ratings_by_movie(movie.id) == []


######################### TESTS queries ########################


@pytest.mark.asyncio
async def test_rating_queries(service: ManageMovieRatingService, movie: Movie) -> None:
    await _rate(service, movie.id, ALICE, 9, "Great")
    await _rate(service, movie.id, BOB, 4, "  ")
    await _rate(service, movie.id, CAROL, 7)

    assert len(await service.get_ratings_by_movie(movie.id)) == 3
    assert len(await service.get_ratings_by_movie_paginated(movie.id, 0, 2)) == 2
    assert [r.rating for r in await service.get_ratings_by_movie_and_range(movie.id, 5, 10)] == [9, 7]
    assert [r.user_id for r in await service.get_ratings_with_reviews_by_movie(movie.id)] == [ALICE]
    assert len(await service.get_ratings_by_user(BOB)) == 1
    assert len(await service.get_ratings_by_user_paginated(BOB, 1, 10)) == 0
    assert len(await service.get_recent_ratings(2)) == 2
    assert await service.get_average_rating(movie.id) == pytest.approx(20 / 3)
    assert await service.get_average_rating(uuid.uuid4()) == 0.0
    assert await service.has_user_rated_movie(movie.id, CAROL) is True


@pytest.mark.asyncio
async def test_can_user_modify_rating(service: ManageMovieRatingService, movie: Movie) -> None:
    rating = await _rate(service, movie.id, ALICE, 5)

    assert await service.can_user_modify_rating(rating.id, ALICE) is True
    assert await service.can_user_modify_rating(rating.id, BOB) is False
    assert await service.can_user_modify_rating(uuid.uuid4(), ALICE) is False


######################### TESTS search_ratings ########################


@pytest.mark.asyncio
async def test_search_ratings_precedence(
    service: ManageMovieRatingService, movie_repository: InMemoryMovieRepository, make_movie: Callable[..., Movie]
) -> None:
    first = await movie_repository.save(make_movie(title="First"))
    second = await movie_repository.save(make_movie(title="Second"))
    start = datetime.now(UTC) - timedelta(minutes=1)
    await _rate(service, first.id, ALICE, 2)
    await _rate(service, first.id, BOB, 8)
    await _rate(service, second.id, ALICE, 10)

    by_movie = await service.search_ratings(SearchRatingsCommand(movie_id=first.id, user_id=BOB))
    assert len(by_movie) == 2

    narrowed = await service.search_ratings(SearchRatingsCommand(movie_id=first.id, min_rating=5, max_rating=10))
    assert [r.rating for r in narrowed] == [8]

    only_min = await service.search_ratings(SearchRatingsCommand(movie_id=first.id, min_rating=5))
    assert len(only_min) == 2

    by_user = await service.search_ratings(SearchRatingsCommand(user_id=ALICE))
    assert {r.movie_id for r in by_user} == {first.id, second.id}

    by_date = await service.search_ratings(
        SearchRatingsCommand(start_date=start, end_date=datetime.now(UTC) + timedelta(minutes=1))
    )
    assert len(by_date) == 3

    recent = await service.search_ratings(SearchRatingsCommand(limit=1))
    assert len(recent) == 1


######################### TESTS statistics ########################


@pytest.mark.asyncio
async def test_movie_rating_statistics(service: ManageMovieRatingService, movie: Movie) -> None:
    await _rate(service, movie.id, ALICE, 10, "Masterpiece")
    await _rate(service, movie.id, BOB, 10)
    await _rate(service, movie.id, CAROL, 4, "Meh")

    statistics = await service.get_movie_rating_statistics(movie.id)

    assert statistics.total_ratings == 3
    assert statistics.average_rating == pytest.approx(8.0)
    assert statistics.min_rating == 4
    assert statistics.max_rating == 10
    assert statistics.ratings_with_reviews == 2
    assert statistics.distribution.rating_10 == 2
    assert statistics.distribution.rating_4 == 1
    assert statistics.distribution.total == 3


@pytest.mark.asyncio
async def test_movie_rating_statistics_count_only_active_ratings(
    service: ManageMovieRatingService, movie: Movie
) -> None:
    first = await _rate(service, movie.id, ALICE, 8)
    await service.delete_rating(first.id, ALICE)
    await _rate(service, movie.id, ALICE, 6)

    statistics = await service.get_movie_rating_statistics(movie.id)

    assert statistics.total_ratings == 1
    assert statistics.average_rating == pytest.approx(6.0)
    assert statistics.distribution.rating_8 == 0
    assert statistics.distribution.rating_6 == 1


@pytest.mark.asyncio
async def test_movie_rating_statistics_empty(service: ManageMovieRatingService, movie: Movie) -> None:
    statistics = await service.get_movie_rating_statistics(movie.id)

    assert statistics.total_ratings == 0
    assert statistics.average_rating == 0.0
    assert (statistics.min_rating, statistics.max_rating) == (0, 0)
    assert statistics.distribution.total == 0


@pytest.mark.asyncio
async def test_user_rating_statistics(
    service: ManageMovieRatingService, movie_repository: InMemoryMovieRepository, make_movie: Callable[..., Movie]
) -> None:
    first = await movie_repository.save(make_movie(title="First"))
    second = await movie_repository.save(make_movie(title="Second"))
    with freeze_time("2026-01-01 10:00:00"):
        await _rate(service, first.id, ALICE, 3, "Weak")
    with freeze_time("2026-02-01 10:00:00"):
        await _rate(service, second.id, ALICE, 9)

    statistics = await service.get_user_rating_statistics(ALICE)

    assert statistics.total_ratings == 2
    assert statistics.average_rating_given == pytest.approx(6.0)
    assert (statistics.min_rating, statistics.max_rating) == (3, 9)
    assert statistics.ratings_with_reviews == 1
    assert statistics.first_rating_date == datetime(2026, 1, 1, 10, tzinfo=UTC)
    assert statistics.last_rating_date == datetime(2026, 2, 1, 10, tzinfo=UTC)


@pytest.mark.asyncio
async def test_user_rating_statistics_empty(service: ManageMovieRatingService) -> None:
    statistics = await service.get_user_rating_statistics(ALICE)

    assert statistics.total_ratings == 0
    assert statistics.first_rating_date is None


@pytest.mark.asyncio
async def test_top_rated_movies(
    service: ManageMovieRatingService, movie_repository: InMemoryMovieRepository, make_movie: Callable[..., Movie]
) -> None:
    good = await movie_repository.save(make_movie(title="Good"))
    best = await movie_repository.save(make_movie(title="Best"))
    lonely = await movie_repository.save(make_movie(title="Lonely"))
    await _rate(service, good.id, ALICE, 7)
    await _rate(service, good.id, BOB, 8)
    await _rate(service, best.id, ALICE, 10)
    await _rate(service, best.id, BOB, 9)
    await _rate(service, lonely.id, ALICE, 10)

    top = await service.get_top_rated_movies(limit=5, min_rating_count=2)

    assert [movie.movie_id for movie in top] == [best.id, good.id]
    assert top[0].average_rating == pytest.approx(9.5)
    assert top[0].total_ratings == 2

    assert len(await service.get_top_rated_movies(limit=1, min_rating_count=1)) == 1
