from __future__ import annotations

from newsfuse.tools.feed_reader import parse_feed_text

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Search results</title>
    <item>
      <title>Monsoon arrives early in Kerala</title>
      <link>https://pub.example/monsoon</link>
      <pubDate>Mon, 03 Jun 2024 08:00:00 GMT</pubDate>
      <description>&lt;a href="https://pub.example/monsoon"&gt;Monsoon arrives&lt;/a&gt; &amp;nbsp; early showers</description>
      <source url="https://pub.example">Pub Daily</source>
    </item>
    <item>
      <title></title>
      <link>https://pub.example/empty</link>
    </item>
    <item>
      <title>Second story title</title>
      <link>https://pub.example/second</link>
    </item>
  </channel>
</rss>
"""


def test_parse_feed_text_extracts_items():
    items = parse_feed_text(RSS)

    assert [i.link for i in items] == ["https://pub.example/monsoon", "https://pub.example/second"]
    first = items[0]
    assert first.title == "Monsoon arrives early in Kerala"
    assert first.source_title == "Pub Daily"
    assert first.pub_date is not None
    assert "Monsoon arrives" in first.snippet
    assert "<a" not in first.snippet


def test_parse_feed_text_respects_limit():
    assert len(parse_feed_text(RSS, limit=1)) == 1


def test_parse_feed_text_handles_garbage():
    assert parse_feed_text("not a feed at all") == []
