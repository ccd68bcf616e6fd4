"""Constants for platform metadata resolvers."""

# Platform identifiers
PLATFORM_YOUTUBE = "youtube"
PLATFORM_SPOTIFY = "spotify"

# oEmbed endpoints
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"
SPOTIFY_OEMBED_URL = "https://open.spotify.com/oembed"

# Favicons served when the platform page itself yields none
YOUTUBE_FAVICON_URL = "https://www.youtube.com/s/desktop/6f1c77b6/img/favicon_32x32.png"
SPOTIFY_FAVICON_URL = "https://open.spotifycdn.com/cdn/images/favicon32.8bbb0783.png"

# Boilerplate served to clients the platform does not render for
YOUTUBE_GENERIC_TITLES = frozenset({"youtube", "- youtube"})
YOUTUBE_GENERIC_DESCRIPTION = "enjoy the videos and music you love"
SPOTIFY_GENERIC_TITLE_TOKENS = ("spotify", "web player")

# oEmbed response fields
FIELD_TITLE = "title"
FIELD_AUTHOR_NAME = "author_name"
FIELD_THUMBNAIL_URL = "thumbnail_url"
