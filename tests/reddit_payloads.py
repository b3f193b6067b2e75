"""Builders for Reddit JSON payloads used across tests."""


def comment_wrapper(comment_id, body, replies=None, kind="t1", **extra):
    """Build a Reddit comment wrapper; replies is a list of wrappers."""
    data = {"id": comment_id, "body": body, **extra}
    if replies:
        data["replies"] = {"kind": "Listing", "data": {"children": replies}}
    else:
        data["replies"] = ""
    return {"kind": kind, "data": data}


def listing_post(post_id, title="Post", stickied=False, **extra):
    """Build one listing entry as returned by /r/{sub}/{sort}."""
    data = {
        "id": post_id,
        "title": title,
        "selftext": extra.pop("selftext", ""),
        "ups": extra.pop("ups", 1),
        "num_comments": extra.pop("num_comments", 0),
        "permalink": extra.pop("permalink", f"/r/test/comments/{post_id}/post/"),
        "thumbnail": extra.pop("thumbnail", "self"),
        "url": extra.pop("url", f"https://www.reddit.com/r/test/comments/{post_id}/post/"),
        "stickied": stickied,
        **extra,
    }
    return {"kind": "t3", "data": data}


def listing_page(posts, after=None):
    return {"kind": "Listing", "data": {"children": posts, "after": after}}
