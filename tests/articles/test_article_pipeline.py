from __future__ import annotations

from datetime import datetime

import pytest
from markupsafe import Markup

from inkwell.errors import RecordInvalid
from inkwell.models import Article, ArticleTag
from inkwell.models.article import BODY_MIN, MAX_TAGS, SUMMARY_MAX, TITLE_MAX, TITLE_MIN

BODY = "b" * BODY_MIN


def _article(**fields) -> Article:
    values = {"title": "A valid article title", "body": BODY, "views": 0}
    values.update(fields)
    return Article(**values)


@pytest.mark.parametrize(
    ("name", "value"),
    [(TITLE_MIN, 10), (TITLE_MAX, 1000), (SUMMARY_MAX, 1500), (BODY_MIN, 128), (MAX_TAGS, 5)],
)
def test_length_and_tag_limits(name: int, value: int) -> None:
    assert name == value


def test_title_of_nine_characters_fails_and_ten_succeeds(articles, db) -> None:
    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="t" * 9, body=BODY)

    assert "is too short (minimum is 10 characters)" in excinfo.value.errors["title"]
    assert db.query(Article).count() == 0

    article = articles.create(title="t" * 10, body=BODY)

    assert article.id is not None
    assert db.query(Article).count() == 1


def test_body_below_minimum_fails_and_exact_minimum_succeeds(articles) -> None:
    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="A valid article title", body="b" * (BODY_MIN - 1))
    assert excinfo.value.errors["body"] == ["is too short (minimum is 128 characters)"]

    assert articles.create(title="A valid article title", body=BODY).id is not None


def test_upper_bounds_on_title_and_summary(pipeline) -> None:
    errors = pipeline.run(_article(title="t" * (TITLE_MAX + 1), summary="s" * (SUMMARY_MAX + 1)))

    assert errors["title"] == ["is too long (maximum is 1000 characters)"]
    assert errors["summary"] == ["is too long (maximum is 1500 characters)"]


def test_blank_title_and_body_report_presence(pipeline) -> None:
    errors = pipeline.run(_article(title="   ", body=""))

    assert "can't be blank" in errors["title"]
    assert "can't be blank" in errors["body"]


def test_negative_views_are_rejected(pipeline) -> None:
    errors = pipeline.run(_article(views=-1))

    assert errors["views"] == ["must be greater than or equal to 0"]


@pytest.mark.parametrize("field", ["title", "summary", "body"])
def test_text_fields_are_stripped(pipeline, field: str) -> None:
    article = _article(summary="A short summary")
    original = getattr(article, field)
    setattr(article, field, f"   {original}\n\t")

    pipeline.run(article)

    assert getattr(article, field) == original


def test_blank_summary_is_stored_as_none(pipeline) -> None:
    article = _article(summary="   ")

    errors = pipeline.run(article)

    assert not errors
    assert article.summary is None


def test_more_than_five_tags_fails_to_save(articles, make_tag) -> None:
    tags = [make_tag(f"tag{i}") for i in range(MAX_TAGS + 1)]

    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="A valid article title", body=BODY, tags=tags)

    assert "tags" in excinfo.value.errors


def test_five_tags_save_through_join_rows(articles, make_tag, db) -> None:
    tags = [make_tag(f"tag{i}") for i in range(MAX_TAGS)]

    article = articles.create(title="A valid article title", body=BODY, tags=tags)

    assert [tag.name for tag in article.tags] == [f"tag{i}" for i in range(MAX_TAGS)]
    assert db.query(ArticleTag).filter_by(article_id=article.id).count() == MAX_TAGS


def test_duplicate_tag_fails_to_save(articles, make_tag, db) -> None:
    tag = make_tag("ruby")

    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="A valid article title", body=BODY, tags=[tag, tag])

    assert excinfo.value.errors["tags"] == ["contains duplicate tag 'ruby'"]
    assert db.query(ArticleTag).count() == 0


def test_duplicate_tag_names_are_rejected_too(articles) -> None:
    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="A valid article title", body=BODY, tags=["Python", "python"])

    assert "tags" in excinfo.value.errors


@pytest.mark.parametrize("field", ["title", "summary", "body"])
def test_field_without_delimiters_keeps_rendered_value_absent(pipeline, renderer, field: str) -> None:
    article = _article(**{field: f"No math in this {field} " + "x" * BODY_MIN})

    pipeline.run(article)

    assert getattr(article, f"{field}_rendered") is None
    assert renderer.calls == []


@pytest.mark.parametrize("field", ["title", "summary", "body"])
def test_math_span_is_rendered_into_derived_field(pipeline, field: str) -> None:
    article = _article(**{field: "Buffer for length validations " + "x" * BODY_MIN + " $$a^2$$"})

    errors = pipeline.run(article)

    assert not errors
    assert "<math>a^2</math>" in getattr(article, f"{field}_rendered")


@pytest.mark.parametrize("field", ["title", "summary", "body"])
def test_malformed_math_adds_error_to_that_field_only(pipeline, renderer, field: str) -> None:
    values = {
        "title": "Title with $$x+1$$ math",
        "summary": "Summary with $$y$$",
        "body": "Body with $$z$$ " + "x" * BODY_MIN,
    }
    values[field] = values[field].replace("$$", "$$\\frac{", 1)
    article = _article(**values)

    errors = pipeline.run(article)

    assert list(errors) == [field]
    assert errors[field][0].startswith("has invalid math notation")
    assert getattr(article, f"{field}_rendered") is None
    others = [name for name in ("title", "summary", "body") if name != field]
    for other in others:
        assert getattr(article, f"{other}_rendered") is not None
    assert len(renderer.calls) == 3


def test_malformed_math_fails_save(articles, db) -> None:
    with pytest.raises(RecordInvalid) as excinfo:
        articles.create(title="Invalid $$\\frac{$$ math", body=BODY)

    assert "title" in excinfo.value.errors
    assert db.query(Article).count() == 0


def test_text_around_math_is_escaped(pipeline) -> None:
    article = _article(title="x < y and $$a$$ & more")

    pipeline.run(article)

    assert article.title_rendered == "x &lt; y and <math>a</math> &amp; more"


def test_every_span_in_a_field_is_rendered(pipeline, renderer) -> None:
    article = _article(body="First $$a$$ then $$b$$. " + "x" * BODY_MIN)

    pipeline.run(article)

    assert renderer.calls == ["a", "b"]
    assert article.body_rendered.startswith("First <math>a</math> then <math>b</math>.")


def test_display_returns_raw_value_without_rendered_content() -> None:
    article = _article(title="Plain words here", summary="Plain summary")

    assert article.display_title == "Plain words here"
    assert article.display_summary == "Plain summary"
    assert not isinstance(article.display_title, Markup)


def test_display_marks_rendered_content_safe() -> None:
    article = _article(title="Raw $$a$$", title_rendered="<math>a</math>", summary_rendered="<b>s</b>")

    assert article.display_title == Markup("<math>a</math>")
    assert isinstance(article.display_title, Markup)
    assert isinstance(article.display_summary, Markup)
    assert article.display_body == BODY


def test_owner_is_the_author(articles, make_user) -> None:
    author = make_user("ada")

    article = articles.create(title="A valid article title", body=BODY, author=author)

    assert article.owner is author
    assert articles.create(title="A valid article title", body=BODY, author=author, anonymous=True).owner is None


def test_recording_a_view_leaves_updated_at_alone(articles, db) -> None:
    article = articles.create(title="A valid article title", body=BODY)
    edited = datetime(2020, 1, 1, 12, 0)
    article.updated_at = edited
    db.commit()

    articles.record_view(article)
    articles.record_view(article)

    assert article.views == 2
    assert article.updated_at == edited
    assert db.query(Article).one().updated_at == edited
