"""Unit tests for the Firestore news cache."""

import datetime
import json
import os
import unittest
from unittest.mock import patch

from ticker_news.services.db import CacheStore
from tests.fakes import FailingFirestore, FakeFirestore


def make_article(url, published_at="2025-10-13T14:30:00+00:00", sentiment="neutral"):
    return {
        "headline": f"Headline for {url}",
        "source": "Reuters",
        "url": url,
        "summary": "Generated summary.",
        "published_at": published_at,
        "sentiment": sentiment,
    }


class TestCacheStoreInit(unittest.TestCase):
    def test_no_project_id(self):
        store = CacheStore(None)
        self.assertIsNone(store.db)
        self.assertFalse(store.enabled)
        self.assertEqual(store.get_fresh("TSLA", datetime.timedelta(minutes=5)), [])
        self.assertEqual(store.save("TSLA", [make_article("https://a.com/1")]), 0)

    def test_client_failure_disables_cache(self):
        with patch("ticker_news.services.db.firestore.Client", side_effect=RuntimeError("no creds")):
            store = CacheStore("test-project")
        self.assertFalse(store.enabled)

    def test_creates_client_for_project(self):
        with patch("ticker_news.services.db.firestore.Client") as mock_client:
            store = CacheStore("test-project", collection="cache")
        mock_client.assert_called_once_with(project="test-project")
        mock_client.return_value.collection.assert_called_once_with("cache")
        self.assertTrue(store.enabled)

    def test_get_id(self):
        store = CacheStore(None)
        first = store.get_id("tsla", "https://a.com/1")
        self.assertEqual(first, store.get_id("TSLA", "https://a.com/1"))
        self.assertNotEqual(first, store.get_id("AAPL", "https://a.com/1"))
        self.assertEqual(len(first), 32)  # MD5 is 32 hex chars


class TestCacheStore(unittest.TestCase):
    def setUp(self):
        self.client = FakeFirestore()
        self.store = CacheStore(None, client=self.client)
        self.docs = self.client.collection("news_articles").docs

    def test_save_and_read_back(self):
        created = self.store.save(
            "tsla",
            [
                make_article("https://a.com/old", "2025-10-12T10:00:00+00:00", "bearish"),
                make_article("https://a.com/new", "2025-10-13T10:00:00+00:00", "bullish"),
                make_article("https://a.com/undated", None),
            ],
        )
        self.assertEqual(created, 3)

        rows = self.store.get_fresh("TSLA", datetime.timedelta(minutes=5))
        self.assertEqual(
            [r["url"] for r in rows],
            ["https://a.com/undated", "https://a.com/new", "https://a.com/old"],
        )
        self.assertEqual(rows[1]["ticker"], "TSLA")
        self.assertEqual(rows[1]["sentiment"], "bullish")
        self.assertEqual(rows[1]["id"], self.store.get_id("TSLA", "https://a.com/new"))
        self.assertIsInstance(rows[1]["published_at"], datetime.datetime)
        # Missing publish dates default to the write time.
        self.assertEqual(rows[0]["published_at"], rows[0]["scraped_at"])

    def test_save_is_idempotent(self):
        article = make_article("https://a.com/1")
        self.assertEqual(self.store.save("TSLA", [article]), 1)
        self.assertEqual(self.store.save("TSLA", [article]), 0)
        self.assertEqual(self.store.save("TSLA", [article, article]), 0)
        self.assertEqual(len(self.docs), 1)

    def test_save_does_not_overwrite(self):
        self.store.save("TSLA", [make_article("https://a.com/1", sentiment="bullish")])
        self.store.save("TSLA", [make_article("https://a.com/1", sentiment="bearish")])
        (doc,) = self.docs.values()
        self.assertEqual(doc["sentiment"], "bullish")

    def test_duplicate_urls_in_one_batch(self):
        article = make_article("https://a.com/1")
        self.assertEqual(self.store.save("TSLA", [article, dict(article)]), 1)
        self.assertEqual(len(self.docs), 1)

    def test_same_url_different_tickers(self):
        self.store.save("TSLA", [make_article("https://a.com/1")])
        self.store.save("AAPL", [make_article("https://a.com/1")])
        self.assertEqual(len(self.docs), 2)

    def test_concurrent_writer_conflict(self):
        first = make_article("https://a.com/1")
        second = make_article("https://a.com/2")

        original_get_all = self.client.get_all

        def racing_get_all(refs):
            snaps = original_get_all(refs)
            # Another request stores the first article after our existence check.
            self.client.collection("news_articles").document(
                self.store.get_id("TSLA", first["url"])
            ).create({"ticker": "TSLA", "url": first["url"], "sentiment": "bullish"})
            return snaps

        self.client.get_all = racing_get_all
        created = self.store.save("TSLA", [first, second])

        self.assertEqual(created, 1)
        self.assertEqual(len(self.docs), 2)
        self.assertEqual(
            self.docs[self.store.get_id("TSLA", first["url"])]["sentiment"], "bullish"
        )

    def test_stale_rows_are_ignored(self):
        self.store.save("TSLA", [make_article("https://a.com/1")])
        for doc in self.docs.values():
            doc["scraped_at"] -= datetime.timedelta(minutes=10)

        self.assertEqual(self.store.get_fresh("TSLA", datetime.timedelta(minutes=5)), [])
        self.assertEqual(len(self.store.get_fresh("TSLA", datetime.timedelta(minutes=15))), 1)

    def test_other_tickers_are_ignored(self):
        self.store.save("AAPL", [make_article("https://a.com/1")])
        self.assertEqual(self.store.get_fresh("TSLA", datetime.timedelta(minutes=5)), [])


class TestFirestoreIndexes(unittest.TestCase):
    def test_freshness_query_index(self):
        path = os.path.join(os.path.dirname(__file__), "..", "firestore.indexes.json")
        with open(path, "r", encoding="utf-8") as f:
            indexes = json.load(f)["indexes"]

        fields = [
            [field["fieldPath"] for field in index["fields"]]
            for index in indexes
            if index["collectionGroup"] == "news_articles"
        ]
        self.assertIn(["ticker", "scraped_at"], fields)


class TestCacheStoreErrors(unittest.TestCase):
    def test_errors_are_soft(self):
        store = CacheStore(None, client=FailingFirestore())
        self.assertEqual(store.get_fresh("TSLA", datetime.timedelta(minutes=5)), [])
        self.assertEqual(store.save("TSLA", [make_article("https://a.com/1")]), 0)


if __name__ == "__main__":
    unittest.main()
