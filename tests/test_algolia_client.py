"""Tests for the Algolia search client."""

from services.algolia import DEFAULT_INDEX, AlgoliaClient, normalize_hit


class TestNormalizeHit:
    def test_snake_case_aliases(self):
        hit = normalize_hit(
            {
                "objectID": 77,
                "name": "Snake",
                "tag_line": "Hiss",
                "post_url": "https://www.producthunt.com/posts/snake",
                "redirect_url": "https://snake.example.com",
                "votes_count": 12,
                "comments_count": 3,
                "thumbnail": {"image_url": "https://img.example.com/s.png"},
                "created_at": "2024-06-11T07:00:00Z",
            }
        )
        assert hit == {
            "objectID": "77",
            "name": "Snake",
            "tagline": "Hiss",
            "description": None,
            "url": "https://www.producthunt.com/posts/snake",
            "website": "https://snake.example.com",
            "votesCount": 12,
            "commentsCount": 3,
            "thumbnail": "https://img.example.com/s.png",
            "postedAt": "2024-06-11T07:00:00Z",
        }

    def test_camel_case_fields_win(self):
        hit = normalize_hit({"id": "9", "name": "Camel", "tagline": "a", "tag_line": "b", "votesCount": 0})
        assert hit["objectID"] == "9"
        assert hit["tagline"] == "a"
        assert hit["votesCount"] == 0


class TestAlgoliaClient:
    def test_configuration(self, monkeypatch, mock_http):
        monkeypatch.setenv("ALGOLIA_APP_ID", "APP")
        monkeypatch.setenv("ALGOLIA_SEARCH_API_KEY", "KEY")
        client = AlgoliaClient({"algolia": {"index_name": "Custom Index"}}, http_client=mock_http)
        assert not client.demo_mode
        assert client.endpoint == "https://APP-dsn.algolia.net/1/indexes/Custom%20Index/query"

    def test_default_index(self, mock_http):
        assert AlgoliaClient(http_client=mock_http).index_name == DEFAULT_INDEX

    async def test_demo_search(self, mock_http):
        client = AlgoliaClient(http_client=mock_http)
        assert client.demo_mode
        hits = await client.search("launch")
        assert {h["name"] for h in hits} == {"LaunchPad Pro", "HuntHelper AI"}
        assert all("objectID" in h for h in hits)
        mock_http.post_json.assert_not_called()

    async def test_search_posts_query(self, mock_http):
        client = AlgoliaClient(http_client=mock_http, app_id="APP", api_key="KEY")
        mock_http.post_json.return_value = {"hits": [{"objectID": "1", "name": "Found"}, "junk"]}

        hits = await client.search("notes", limit=200)

        assert [h["name"] for h in hits] == ["Found"]
        url, payload = mock_http.post_json.call_args.args
        assert url == "https://APP-dsn.algolia.net/1/indexes/Posts_production/query"
        assert payload == {"query": "notes", "hitsPerPage": 50}
        headers = mock_http.post_json.call_args.kwargs["headers"]
        assert headers["X-Algolia-Application-Id"] == "APP"
        assert headers["X-Algolia-API-Key"] == "KEY"

    async def test_search_respects_configured_max(self, mock_http):
        client = AlgoliaClient({"limits": {"search_max": 20}}, http_client=mock_http, app_id="A", api_key="K")
        mock_http.post_json.return_value = {"hits": []}
        await client.search("x", limit=40)
        assert mock_http.post_json.call_args.args[1]["hitsPerPage"] == 20

    async def test_failure_returns_empty(self, mock_http):
        client = AlgoliaClient(http_client=mock_http, app_id="A", api_key="K")
        mock_http.post_json.return_value = None
        assert await client.search("x") == []
        mock_http.post_json.side_effect = RuntimeError("down")
        assert await client.search("x") == []

    async def test_close_leaves_shared_session(self, mock_http):
        client = AlgoliaClient(http_client=mock_http)
        await client.close()
        mock_http.close.assert_not_called()
