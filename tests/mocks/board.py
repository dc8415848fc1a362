"""Seed data for the board used throughout the test suite.

    category 1 "General"      forums 1 (Announcements), 2 (Sub Forum, child of 1),
                              3 (Links, redirect), 4 (Counting, unique views)
    category 2 "Hidden"       not visible
    topic 1 "Hello World"     forum 1, posts 1-3, poll, liked by alice
    topic 2 "Second Topic"    forum 1, post 4
    topic 3 "Counting"        forum 4, post 5

    members  1 admin (Administrators), 2 alice, 3 bob (hidden from who's online)
"""

import json
from typing import Any

from boardcore.core.config import DatabaseConfig
from boardcore.core.query_builder import QueryBuilder
from boardcore.ports.database import DatabaseProvider

# 2023-11-14T22:13:20Z in epoch milliseconds
BASE_TIME = 1_700_000_000_000

ADMIN_ID = 1
ALICE_ID = 2
BOB_ID = 3

POLL = {
    "closed": False,
    "expire": {"enabled": False, "expireDateTime": None},
    "questions": {
        "1": {
            "question": "Favourite colour?",
            "options": {"1": "Red", "2": "Blue"},
            "votes": {"1": 0, "2": 0},
            "voters": {"1": [], "2": []},
        }
    },
}

SEED: dict[str, list[dict[str, Any]]] = {
    "locales": [
        {"id": 1, "title": "English", "folder": "en-US", "isDefault": 1},
    ],
    "themes": [
        {
            "id": 1,
            "title": "Default",
            "folder": "default",
            "imagesetFolder": "default-images",
            "isDefault": 1,
        },
    ],
    "settings": [
        {"type": "number", "name": "defaultLocaleId", "value": "1"},
        {"type": "number", "name": "defaultThemeId", "value": "1"},
        {"type": "number", "name": "guestGroupId", "value": "3"},
        {
            "type": "serialized",
            "name": "defaultPerPage",
            "value": json.dumps({"topics": 20, "posts": 2, "maxPageLinks": 5}),
        },
        {"type": "bool", "name": "useDisplayName", "value": "true"},
        {
            "type": "serialized",
            "name": "defaultToggles",
            "value": json.dumps({"display": {"browsingForumLink": True}}),
        },
        {
            "type": "serialized",
            "name": "defaultBBIC",
            "value": json.dumps({"maxTags": 2, "tagMinFontSize": 10, "tagMaxFontSize": 20}),
        },
        {"type": "bool", "name": "defaultCensor", "value": "false"},
        {"type": "string", "name": "defaultCensorChar", "value": "*"},
    ],
    "user_groups": [
        {"id": 1, "name": "Administrators", "isAdmin": 1, "display": 1, "sortOrder": 1},
        {"id": 2, "name": "Members", "display": 1, "sortOrder": 2},
        {"id": 3, "name": "Guests", "display": 0, "sortOrder": 3},
        {"id": 4, "name": "Moderators", "isModerator": 1, "display": 1, "sortOrder": 0},
    ],
    "members": [
        {
            "id": ADMIN_ID,
            "username": "admin",
            "displayName": "The Admin",
            "emailAddress": "admin@example.com",
            "localeId": 1,
            "themeId": 1,
            "useDisplayName": 1,
            "primaryGroupId": 1,
            "perPage": json.dumps({"topics": 20, "posts": 2}),
            "displayOnWo": 1,
            "joined": BASE_TIME,
            "totalPosts": 3,
        },
        {
            "id": ALICE_ID,
            "username": "alice",
            "displayName": "Alice A.",
            "emailAddress": "alice@example.com",
            "localeId": 1,
            "themeId": 1,
            "primaryGroupId": 2,
            "perPage": json.dumps({"topics": 20, "posts": 2}),
            "displayOnWo": 1,
            "joined": BASE_TIME + 1_000,
            "totalPosts": 2,
            "toggles": json.dumps({"display": {"browsingForumLink": True}}),
        },
        {
            "id": BOB_ID,
            "username": "bob",
            "localeId": 1,
            "themeId": 1,
            "primaryGroupId": 2,
            "displayOnWo": 0,
            "joined": BASE_TIME + 2_000,
        },
    ],
    "categories": [
        {"id": 1, "title": "General", "sortOrder": 1, "createdAt": BASE_TIME, "visible": 1},
        {"id": 2, "title": "Hidden", "sortOrder": 2, "createdAt": BASE_TIME, "visible": 0},
    ],
    "forums": [
        {
            "id": 1,
            "categoryId": 1,
            "title": "Announcements",
            "sortOrder": 1,
            "createdAt": BASE_TIME,
            "hotThreshold": 2,
            "popularityThreshold": 10,
            "totalTopics": 2,
            "totalPosts": 4,
            "lastPostId": 4,
        },
        {
            "id": 2,
            "categoryId": 1,
            "title": "Sub Forum",
            "sortOrder": 1,
            "createdAt": BASE_TIME,
            "hasParent": 1,
            "parentId": 1,
            "showSubForums": 1,
        },
        {
            "id": 3,
            "categoryId": 1,
            "title": "Links",
            "sortOrder": 2,
            "createdAt": BASE_TIME,
            "redirect": json.dumps(
                {
                    "enabled": True,
                    "url": "https://example.com",
                    "uniqueClicks": True,
                    "totalClicks": 0,
                    "lastClick": None,
                }
            ),
        },
        {
            "id": 4,
            "categoryId": 1,
            "title": "Counting",
            "sortOrder": 3,
            "createdAt": BASE_TIME,
            "uniqueViewIncrementation": 1,
            "totalTopics": 1,
            "totalPosts": 1,
            "lastPostId": 5,
        },
    ],
    "topics": [
        {
            "id": 1,
            "categoryId": 1,
            "forumId": 1,
            "title": "Hello World",
            "createdBy": ADMIN_ID,
            "createdAt": BASE_TIME + 10_000,
            "totalReplies": 2,
            "totalViews": 5,
            "lastPostId": 3,
            "tags": json.dumps([1]),
            "poll": json.dumps(POLL),
        },
        {
            "id": 2,
            "categoryId": 1,
            "forumId": 1,
            "title": "Second Topic",
            "createdBy": ALICE_ID,
            "createdAt": BASE_TIME + 20_000,
            "lastPostId": 4,
        },
        {
            "id": 3,
            "categoryId": 1,
            "forumId": 4,
            "title": "Counting",
            "createdBy": ADMIN_ID,
            "createdAt": BASE_TIME + 30_000,
            "lastPostId": 5,
        },
    ],
    "posts": [
        {
            "id": 1,
            "categoryId": 1,
            "forumId": 1,
            "topicId": 1,
            "createdBy": ADMIN_ID,
            "createdAt": BASE_TIME + 10_000,
            "content": "First!",
            "isFirstPost": 1,
        },
        {
            "id": 2,
            "categoryId": 1,
            "forumId": 1,
            "topicId": 1,
            "createdBy": ALICE_ID,
            "createdAt": BASE_TIME + 11_000,
            "content": "See attached.",
            "attachments": json.dumps([{"id": 1}]),
        },
        {
            "id": 3,
            "categoryId": 1,
            "forumId": 1,
            "topicId": 1,
            "createdBy": ADMIN_ID,
            "createdAt": BASE_TIME + 12_000,
            "content": "Thanks.",
        },
        {
            "id": 4,
            "categoryId": 1,
            "forumId": 1,
            "topicId": 2,
            "createdBy": ALICE_ID,
            "createdAt": BASE_TIME + 20_000,
            "content": "Another one.",
            "isFirstPost": 1,
        },
        {
            "id": 5,
            "categoryId": 1,
            "forumId": 4,
            "topicId": 3,
            "createdBy": ADMIN_ID,
            "createdAt": BASE_TIME + 30_000,
            "content": "Count me.",
            "isFirstPost": 1,
        },
    ],
    "member_attachments": [
        {
            "id": 1,
            "memberId": ALICE_ID,
            "fileName": "diagram.png",
            "fileSize": 1024,
            "uploadedAt": BASE_TIME,
        },
    ],
    "tags": [
        {"id": 1, "title": "python", "createdBy": ADMIN_ID, "createdAt": BASE_TIME},
        {"id": 2, "title": "asyncio", "createdBy": ADMIN_ID, "createdAt": BASE_TIME + 1},
        {"id": 3, "title": "SQLite", "createdBy": ADMIN_ID, "createdAt": BASE_TIME + 2},
    ],
    "liked_content": [
        {"contentType": "topic", "contentId": 1, "memberId": ALICE_ID, "likedAt": BASE_TIME},
    ],
    "sessions": [
        {"id": "s-admin", "memberId": ADMIN_ID, "location": "/topic/1/hello-world/"},
        {
            "id": "s-bob",
            "memberId": BOB_ID,
            "location": "/forum/1/announcements/",
            "displayOnWo": 0,
        },
        {"id": "s-guest", "memberId": 0, "location": "/topic/1/hello-world/"},
        {
            "id": "s-bot",
            "memberId": 0,
            "location": "/forum/2/sub-forum/",
            "isBot": 1,
            "botName": "Googlebot",
        },
    ],
    "registry": [
        {
            "dataType": "serialized",
            "name": "mostUsers",
            "value": json.dumps({"total": 12, "timestamp": BASE_TIME}),
        },
    ],
}


async def seed_board(db: DatabaseProvider, config: DatabaseConfig) -> None:
    """Insert the SEED rows through the query builder."""
    for table, rows in SEED.items():
        for row in rows:
            await db.query(
                QueryBuilder(config).insert_into(table, list(row), list(row.values())).build()
            )
