"""
Derived catalog views: popular, latest, genre, categories, search, similar
"""
import pytest

from moviehub.schemas.movie import CastMember
from moviehub.services.derivation import DerivationEngine
from tests.fake_service import build_movie


@pytest.fixture
def trio():
    """A(Action, Drama / 2010 / 8.5), B(Drama / 2020 / 6.0), C(Comedy / 2015 / 9.0)"""
    return [
        build_movie("A", genre="Action, Drama", year=2010, rating=8.5),
        build_movie("B", genre="Drama", year=2020, rating=6.0),
        build_movie("C", genre="Comedy", year=2015, rating=9.0),
    ]


@pytest.fixture
def catalog():
    return [
        build_movie(1, genre="Action, Sci-Fi", year=2010, rating=8.8, title="Inception",
                    producer="Christopher Nolan",
                    cast=[CastMember(id="10", name="Leonardo DiCaprio")]),
        build_movie(2, genre="Action, Crime, Drama", year=2008, rating=9.0, title="The Dark Knight",
                    producer="Christopher Nolan",
                    cast=[CastMember(id="12", name="Christian Bale")]),
        build_movie(3, genre="Drama, Romance", year=1997, rating=7.9, title="Titanic",
                    producer="James Cameron",
                    cast=[CastMember(id="10", name="Leonardo DiCaprio"), CastMember(id="13", name="Kate Winslet")]),
        build_movie(4, genre="Comedy", year=2007, title="Superbad", producer="Judd Apatow"),
        build_movie(5, title="Untitled Project"),
    ]


# ============================================
# Scenario from the catalog screens
# ============================================

def test_popular_scenario(trio):
    assert [m.id for m in DerivationEngine.popular(trio, 2)] == ["C", "A"]


def test_latest_scenario(trio):
    assert [m.id for m in DerivationEngine.latest(trio, 2)] == ["B", "C"]


def test_similar_scenario(trio):
    a = trio[0]
    assert [m.id for m in DerivationEngine.similar(trio[1:], a)] == ["B"]


# ============================================
# popular / latest
# ============================================

class TestRankedViews:

    def test_popular_skips_unrated_and_truncates(self, catalog):
        result = DerivationEngine.popular(catalog, 3)
        assert len(result) == 3
        assert all(m.rating is not None for m in result)
        ratings = [m.rating for m in result]
        assert ratings == sorted(ratings, reverse=True)

    def test_popular_ties_keep_collection_order(self):
        movies = [
            build_movie("x", rating=7.0),
            build_movie("y", rating=8.0),
            build_movie("z", rating=7.0),
            build_movie("w", rating=7.0),
        ]
        assert [m.id for m in DerivationEngine.popular(movies, 10)] == ["y", "x", "z", "w"]

    def test_popular_keeps_zero_rating(self):
        movies = [build_movie("zero", rating=0.0), build_movie("none")]
        assert [m.id for m in DerivationEngine.popular(movies, 5)] == ["zero"]

    def test_latest_skips_undated_and_sorts_descending(self, catalog):
        result = DerivationEngine.latest(catalog, 10)
        assert [m.id for m in result] == ["1", "2", "4", "3"]

    def test_latest_ties_keep_collection_order(self):
        movies = [build_movie("p", year=2000), build_movie("q", year=2001), build_movie("r", year=2000)]
        assert [m.id for m in DerivationEngine.latest(movies, 3)] == ["q", "p", "r"]

    @pytest.mark.parametrize("n", [0, -1])
    def test_non_positive_limit_returns_nothing(self, catalog, n):
        assert DerivationEngine.popular(catalog, n) == []
        assert DerivationEngine.latest(catalog, n) == []

    def test_views_do_not_mutate_input(self, catalog):
        before = [m.id for m in catalog]
        DerivationEngine.popular(catalog, 2)
        DerivationEngine.latest(catalog, 2)
        assert [m.id for m in catalog] == before


# ============================================
# genres & categories
# ============================================

class TestGenres:

    def test_by_genre_is_case_insensitive(self, catalog):
        assert [m.id for m in DerivationEngine.by_genre(catalog, "drama")] == ["2", "3"]

    def test_by_genre_matches_substring_of_token(self, catalog):
        assert [m.id for m in DerivationEngine.by_genre(catalog, "sci")] == ["1"]

    def test_by_genre_blank_tag_matches_nothing(self, catalog):
        assert DerivationEngine.by_genre(catalog, "  ") == []

    def test_categories_first_seen_order_without_duplicates(self, catalog):
        assert DerivationEngine.categories(catalog) == [
            "Action", "Sci-Fi", "Crime", "Drama", "Romance", "Comedy",
        ]

    def test_genre_tags_trim_and_drop_empty_tokens(self):
        movie = build_movie("g", genre=" Action ,, Drama , ")
        assert movie.genre_tags == ("Action", "Drama")


# ============================================
# search
# ============================================

class TestSearch:

    @pytest.mark.parametrize("query", ["", "   ", "\t"])
    def test_blank_query_returns_empty(self, catalog, query):
        assert DerivationEngine.search(catalog, query) == []

    def test_matches_title(self, catalog):
        assert [m.id for m in DerivationEngine.search(catalog, "titan")] == ["3"]

    def test_matches_director(self, catalog):
        assert [m.id for m in DerivationEngine.search(catalog, "NOLAN")] == ["1", "2"]

    def test_matches_genre(self, catalog):
        assert [m.id for m in DerivationEngine.search(catalog, "comedy")] == ["4"]

    def test_matches_cast_member(self, catalog):
        assert [m.id for m in DerivationEngine.search(catalog, "dicaprio")] == ["1", "3"]

    def test_fields_are_or_combined(self, catalog):
        # "an" hits Nolan (director), Christian Bale (cast), Titanic (title)
        result = {m.id for m in DerivationEngine.search(catalog, "an")}
        assert result == {"1", "2", "3"}


# ============================================
# similar
# ============================================

class TestSimilar:

    def test_excludes_target_and_requires_shared_token(self, catalog):
        target = catalog[1]  # Action, Crime, Drama
        result = DerivationEngine.similar(catalog, target)
        assert target.id not in [m.id for m in result]
        assert [m.id for m in result] == ["1", "3"]
        for movie in result:
            assert set(movie.genre_tags) & set(target.genre_tags)

    def test_token_equality_is_case_sensitive(self):
        target = build_movie("t", genre="Drama")
        movies = [target, build_movie("lower", genre="drama"), build_movie("same", genre="Drama")]
        assert [m.id for m in DerivationEngine.similar(movies, target)] == ["same"]

    def test_limit_keeps_collection_order(self):
        target = build_movie("t", genre="Action")
        movies = [build_movie(i, genre="Action") for i in range(10)]
        assert [m.id for m in DerivationEngine.similar(movies, target, limit=3)] == ["0", "1", "2"]

    def test_default_limit_is_six(self):
        target = build_movie("t", genre="Action")
        movies = [build_movie(i, genre="Action") for i in range(10)]
        assert len(DerivationEngine.similar(movies, target)) == 6

    def test_movie_without_genre_has_no_similar(self, catalog):
        assert DerivationEngine.similar(catalog, catalog[4]) == []


# ============================================
# directors & actors
# ============================================

class TestPeople:

    def test_directors_sorted_unique(self, catalog):
        assert DerivationEngine.directors(catalog) == ["Christopher Nolan", "James Cameron", "Judd Apatow"]

    def test_actors_sorted_unique(self, catalog):
        assert DerivationEngine.actors(catalog) == [
            "Christian Bale", "Kate Winslet", "Leonardo DiCaprio",
        ]

    def test_movies_by_director(self, catalog):
        assert [m.id for m in DerivationEngine.movies_by_director(catalog, "cameron")] == ["3"]

    def test_other_movies_by_actor_excludes_current(self, catalog):
        result = DerivationEngine.other_movies_by_actor(catalog, "Leonardo DiCaprio", catalog[0])
        assert [m.id for m in result] == ["3"]
