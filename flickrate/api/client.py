"""Flickr REST API client."""

import time
from urllib.parse import quote, urlencode
from xml.etree.ElementTree import Element

import httpx
import structlog

from flickrate.api.constants import COMPONENT_API, RESPONSE_FORMAT, REST_ENDPOINT
from flickrate.api.metrics import ApiMetrics
from flickrate.api.models import LoginIdentity, PhotoDetail, PhotoInfo, PhotoRef
from flickrate.api.operations import (
    ApiOperation,
    CheckLogin,
    FindByUsername,
    GetFavorites,
    GetInfo,
    SearchPhotos,
)
from flickrate.api.parser import (
    parse_favorites_total,
    parse_login,
    parse_photo_info,
    parse_photo_page,
    parse_response,
    parse_user_nsid,
)
from flickrate.errors import FlickrateError
from flickrate.oauth.models import Credential
from flickrate.oauth.signer import RequestSigner
from flickrate.transport import http_get


logger = structlog.get_logger()


class FlickrClient:
    """Client for the Flickr REST endpoint.

    Requests are OAuth-signed when the credential carries an access token
    pair and sent with the bare API key otherwise. Safe to share between
    threads: the only mutable state is the httpx client and the metrics
    singleton, both of which are thread-safe.
    """

    def __init__(  # noqa: PLR0913
        self,
        credential: Credential,
        http_client: httpx.Client,
        signer: RequestSigner | None = None,
        endpoint: str = REST_ENDPOINT,
        run_id: str = "",
    ) -> None:
        """Initialize the client.

        Args:
            credential: Consumer credential, optionally with an access token.
            http_client: Shared HTTP client.
            signer: Request signer (built from the credential if omitted).
            endpoint: REST endpoint URL.
            run_id: Run identifier for logging.
        """
        self._credential = credential
        self._http_client = http_client
        self._signer = signer or RequestSigner(credential)
        self._endpoint = endpoint
        self._metrics = ApiMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_API, run_id=run_id)

    @property
    def is_authenticated(self) -> bool:
        """Check if calls are signed with an access token."""
        return self._credential.has_access_token

    def build_url(self, operation: ApiOperation) -> str:
        """Build the request URL for an operation.

        Args:
            operation: Operation to call.

        Returns:
            Signed or key-only URL.
        """
        params = {
            "method": operation.api_method,
            "api_key": self._credential.consumer_key,
            "format": RESPONSE_FORMAT,
            **operation.to_params(),
        }
        if self._credential.has_access_token:
            return self._signer.build_signed_url(self._endpoint, params)
        return f"{self._endpoint}?{urlencode(params, quote_via=quote)}"

    def call(self, operation: ApiOperation) -> Element:
        """Execute an operation.

        Args:
            operation: Operation to call.

        Returns:
            The ``<rsp>`` root element of a successful response.

        Raises:
            NetworkError: On transport failure.
            ProtocolError: On a non-2xx status or ``stat="fail"`` body.
        """
        start_time_ns = time.perf_counter_ns()
        try:
            response = http_get(
                self._http_client, self.build_url(operation), COMPONENT_API
            )
            root = parse_response(response.content)
        except FlickrateError as e:
            self._metrics.record_failure(e.error_class)
            self._log.warning(
                "api_call_failed",
                api_method=operation.api_method,
                error_class=e.error_class.value,
                error=e.message,
            )
            raise

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_call(operation.api_method, duration_ms)
        self._log.debug(
            "api_call_complete",
            api_method=operation.api_method,
            duration_ms=round(duration_ms, 2),
        )
        return root

    def check_login(self) -> LoginIdentity:
        """Identify the user the access token belongs to."""
        return parse_login(self.call(CheckLogin()))

    def find_user_id(self, username: str) -> str:
        """Resolve a user name to an NSID."""
        return parse_user_nsid(self.call(FindByUsername(username=username)))

    def search_photos(self, user_id: str) -> list[PhotoRef]:
        """List all of a user's photos, walking every result page.

        Args:
            user_id: NSID of the photo owner.

        Returns:
            Photo references in the order the API returned them.
        """
        refs: list[PhotoRef] = []
        page = 1
        pages = 1
        while page <= pages:
            batch, _, pages = parse_photo_page(
                self.call(SearchPhotos(user_id=user_id, page=page))
            )
            refs.extend(batch)
            page += 1

        self._log.info("photos_listed", user_id=user_id, photo_count=len(refs))
        return refs

    def get_info(self, photo_id: str) -> PhotoInfo:
        """Fetch views, dates and URLs of a photo."""
        return parse_photo_info(self.call(GetInfo(photo_id=photo_id)))

    def get_favorites_count(self, photo_id: str) -> int:
        """Fetch the number of users who favorited a photo."""
        return parse_favorites_total(self.call(GetFavorites(photo_id=photo_id)))

    def get_detail(self, ref: PhotoRef) -> PhotoDetail:
        """Fetch the full detail record of a photo.

        Both the info and favorites calls must succeed.

        Args:
            ref: Photo reference from a search.

        Returns:
            Complete PhotoDetail.
        """
        info = self.get_info(ref.id)
        favorites = self.get_favorites_count(ref.id)
        return PhotoDetail(ref=ref, info=info, favorites=favorites)
