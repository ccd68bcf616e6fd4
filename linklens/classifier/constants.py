"""Classification tables for link types.

Loaded once at import and never mutated.
"""

from enum import Enum


class LinkType(str, Enum):
    """Coarse category of a link."""

    SOCIAL = "social"
    PRODUCT = "product"
    NEWS = "news"
    VIDEO = "video"
    PORTFOLIO = "portfolio"
    BLOG = "blog"
    EDUCATION = "education"
    FORUM = "forum"
    OTHER = "other"


SOCIAL_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "linkedin.com",
    "youtube.com",
    "tiktok.com",
    "snapchat.com",
    "pinterest.com",
    "reddit.com",
    "discord.com",
    "telegram.org",
    "whatsapp.com",
    "tumblr.com",
    "flickr.com",
    "vimeo.com",
    "twitch.tv",
    "clubhouse.com",
    "mastodon.social",
)

VIDEO_DOMAINS = (
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "dailymotion.com",
    "twitch.tv",
    "tiktok.com",
    "vine.co",
    "wistia.com",
    "brightcove.com",
    "jwplayer.com",
)

NEWS_DOMAINS = (
    "cnn.com",
    "bbc.com",
    "reuters.com",
    "ap.org",
    "nytimes.com",
    "wsj.com",
    "guardian.com",
    "washingtonpost.com",
    "forbes.com",
    "bloomberg.com",
    "techcrunch.com",
    "theverge.com",
    "engadget.com",
    "wired.com",
    "ars-technica.com",
    "news.com",
    "newsweek.com",
    "time.com",
    "npr.org",
    "abc.com",
    "cbsnews.com",
)

# Entries with a path only match that section of the site
PRODUCT_DOMAINS = (
    "amazon.com",
    "ebay.com",
    "shopify.com",
    "etsy.com",
    "alibaba.com",
    "walmart.com",
    "target.com",
    "bestbuy.com",
    "apple.com/store",
    "store.google.com",
    "microsoft.com/store",
    "nike.com",
    "adidas.com",
    "zalando.com",
    "asos.com",
    "blinkit.com",
)

EDUCATION_DOMAINS = (
    "coursera.org",
    "edx.org",
    "udemy.com",
    "khanacademy.org",
    "mit.edu",
    "harvard.edu",
    "stanford.edu",
    "berkeley.edu",
    "udacity.com",
    "pluralsight.com",
    "lynda.com",
    "skillshare.com",
    "masterclass.com",
    "codecademy.com",
)

FORUM_DOMAINS = (
    "stackoverflow.com",
    "stackexchange.com",
    "quora.com",
    "reddit.com",
    "discourse.org",
    "phpbb.com",
    "vbulletin.com",
    "xenforo.com",
    "invision.com",
)

# Checked in order; first hit wins
DOMAIN_RULES: tuple[tuple[LinkType, tuple[str, ...]], ...] = (
    (LinkType.SOCIAL, SOCIAL_DOMAINS),
    (LinkType.VIDEO, VIDEO_DOMAINS),
    (LinkType.NEWS, NEWS_DOMAINS),
    (LinkType.PRODUCT, PRODUCT_DOMAINS),
    (LinkType.EDUCATION, EDUCATION_DOMAINS),
    (LinkType.FORUM, FORUM_DOMAINS),
)

PATH_RULES: tuple[tuple[LinkType, tuple[str, ...]], ...] = (
    (LinkType.PRODUCT, ("/shop", "/store", "/buy", "/product", "/cart", "/checkout")),
    (LinkType.BLOG, ("/blog", "/article", "/post")),
    (LinkType.NEWS, ("/news", "/press", "/media")),
    (LinkType.VIDEO, ("/video", "/watch", "/play")),
    (LinkType.PORTFOLIO, ("/portfolio", "/work", "/projects")),
    (
        LinkType.EDUCATION,
        ("/course", "/learn", "/education", "/tutorial", "/training"),
    ),
    (LinkType.FORUM, ("/forum", "/discussion", "/community")),
)

KEYWORD_RULES: tuple[tuple[LinkType, tuple[str, ...]], ...] = (
    (
        LinkType.SOCIAL,
        ("follow", "connect", "social", "network", "profile", "posts"),
    ),
    (
        LinkType.PRODUCT,
        ("buy", "price", "shop", "store", "product", "sale", "discount", "cart"),
    ),
    (
        LinkType.NEWS,
        ("breaking", "news", "report", "latest", "update", "headline"),
    ),
    (
        LinkType.VIDEO,
        ("video", "watch", "play", "stream", "episode", "movie"),
    ),
    (
        LinkType.PORTFOLIO,
        ("portfolio", "work", "projects", "showcase", "gallery", "design"),
    ),
    (
        LinkType.BLOG,
        ("blog", "article", "post", "author", "written", "published"),
    ),
    (
        LinkType.EDUCATION,
        (
            "course",
            "learn",
            "education",
            "tutorial",
            "training",
            "lesson",
            "study",
            "university",
        ),
    ),
    (
        LinkType.FORUM,
        (
            "forum",
            "discussion",
            "community",
            "question",
            "answer",
            "thread",
            "reply",
            "comment",
        ),
    ),
)

HTML_RULES: tuple[tuple[LinkType, tuple[str, ...]], ...] = (
    (LinkType.PRODUCT, ('class="product"', "add to cart", "price", "buy now")),
    (LinkType.VIDEO, ("<video", "video", "youtube", "vimeo")),
    (LinkType.BLOG, ("article", "blog", "post-content", "entry-content")),
)
