"""Constants for the Flickr REST API."""

REST_ENDPOINT = "https://api.flickr.com/services/rest/"
RESPONSE_FORMAT = "rest"

# Response status values
STAT_OK = "ok"
STAT_FAIL = "fail"

# flickr.photos.search: include photos of every safety level
SAFE_SEARCH_ALL = 3

# flickr.photos.getFavorites: only the total attribute is read
FAVORITES_PER_PAGE = 1

# URL type of the photo page in flickr.photos.getInfo
URL_TYPE_PHOTOPAGE = "photopage"

# Log component name
COMPONENT_API = "api"
