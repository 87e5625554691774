from concurrent.futures import TimeoutError as LookupTimeout
from dataclasses import dataclass
from typing import Dict

from aws_lambda_powertools import Logger

from location_cache import LocationCache
from placeholders import render, request_bindings
from tags_handler import DistributionIdentity, ResolutionError

HTTP_STATUS_NOT_FOUND = "404"
HTTP_STATUS_FOUND = "302"
log = Logger(child=True)


@dataclass(frozen=True)
class RequestContext:
    method: str
    path: str
    query_string: str
    host: str

    @classmethod
    def from_cf_request(cls, request: Dict) -> "RequestContext":
        # Host:-header is required, it is always present
        return RequestContext(
            method=request["method"],
            path=request["uri"],
            query_string=request.get("querystring", ""),
            host=request["headers"]["host"][0]["value"],
        )


def build_redirect(response: Dict, location: str) -> Dict:
    response["status"] = HTTP_STATUS_FOUND
    response["statusDescription"] = "Found"
    # Drop the body, it is not needed for a redirect
    response["body"] = ""
    response.setdefault("headers", {})["location"] = [{"key": "Location", "value": location}]
    return response


def handle_response(
    request: RequestContext,
    identity: DistributionIdentity,
    response: Dict,
    cache: LocationCache,
    timeout_ms: int,
) -> Dict:
    """
    Turn a 404 origin response into a 302 to the distribution's fallback location.

    Every path except the redirect returns response untouched. A lookup that
    misses the deadline is abandoned, not cancelled: it keeps running and
    still fills the cache for later requests. A ResolutionError raised before
    the deadline fails the invocation.
    """
    if response["status"] != HTTP_STATUS_NOT_FOUND:
        log.info("Passing response through unmodified")
        return response

    log.info("Response is a 404, processing...")
    lookup = cache.get_or_resolve(identity.account_id, identity.distribution_id)
    try:
        template = lookup.result(timeout=timeout_ms / 1000)
    except LookupTimeout:
        log.warning("Timeout generating redirect, passing through the 404 anyway...")
        return response
    except ResolutionError:
        log.exception(f"Fallback location lookup failed for {identity.distribution_id}")
        raise

    if template is None:
        log.info("No location specified, passing through unmodified")
        return response
    log.info(f"Found redirect location: {template}")

    location = render(template, request_bindings(request))
    log.info(f"Rendering 302 redirect to: {location}")
    return build_redirect(response, location)
