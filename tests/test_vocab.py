import pytest

from vocab_drill.db import init_db
from vocab_drill.models import Term, Topic
from vocab_drill.seed import seed_all
from vocab_drill.vocab import VocabSource


def test_list_topics_in_seed_order(drill_db):
    source = VocabSource(drill_db, words_per_day=5)
    topics = source.list_topics()
    assert [t.id for t in topics] == ["five", "two", "twelve"]
    assert [t.term_count for t in topics] == [5, 2, 12]


def test_day_unit_count_rounds_up(drill_db):
    source = VocabSource(drill_db, words_per_day=5)
    assert source.day_unit_count("five") == 1
    assert source.day_unit_count("two") == 1
    assert source.day_unit_count("twelve") == 3


def test_day_unit_count_unknown_topic(drill_db):
    assert VocabSource(drill_db).day_unit_count("nope") == 0


def test_get_day_unit_slices(drill_db):
    source = VocabSource(drill_db, words_per_day=5)
    day1 = source.get_day_unit("twelve", 1)
    day3 = source.get_day_unit("twelve", 3)
    assert [t.text for t in day1] == [f"dozen{i}" for i in range(1, 6)]
    assert [t.text for t in day3] == ["dozen11", "dozen12"]
    assert day1[0] == Term(id=1, text="dozen1", meaning="meaning of dozen1", category="n")


def test_get_day_unit_out_of_range(drill_db):
    source = VocabSource(drill_db, words_per_day=5)
    assert source.get_day_unit("twelve", 4) == []
    assert source.get_day_unit("twelve", 0) == []


def test_get_topic(drill_db):
    source = VocabSource(drill_db)
    assert source.get_topic("two") == Topic(id="two", name="Two", term_count=2)
    assert source.get_topic("missing") is None


def test_words_per_day_must_be_positive(tmp_db):
    with pytest.raises(ValueError):
        VocabSource(tmp_db, words_per_day=0)


def test_bundled_topics_are_partitioned(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    source = VocabSource(tmp_db, words_per_day=10)
    for topic in source.list_topics():
        days = source.day_unit_count(topic.id)
        total = sum(len(source.get_day_unit(topic.id, d)) for d in range(1, days + 1))
        assert total == topic.term_count
        assert all(source.get_day_unit(topic.id, d) for d in range(1, days + 1))
