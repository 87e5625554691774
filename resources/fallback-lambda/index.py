import os

from aws_lambda_powertools import Logger

from location_cache import LocationCache
from redirect_handler import RequestContext, handle_response
from tags_handler import DistributionIdentity, TagsHandler

# Lambda@Edge allows 30 seconds on Origin Response, time out before that so
# it shows up in our own logs instead of as a platform error.
TIMEOUT_MS = int(os.environ.get("FALLBACK_TIMEOUT_MS", "25000"))

log = Logger()

tags_handler = TagsHandler()
location_cache = LocationCache(tags_handler.get_fallback_location)


@log.inject_lambda_context(log_event=True)
def handler(event, context):
    cf_record = event["Records"][0]["cf"]
    request_config = cf_record["config"]
    # requestId is not present on Origin Request
    log.info(
        f"Handling {request_config.get('eventType')} for {request_config['distributionId']}: "
        f"id={request_config.get('requestId')}"
    )

    request = RequestContext.from_cf_request(cf_record["request"])
    log.info(f"{request.method} request for //{request.host}{request.path}?{request.query_string}")

    identity = DistributionIdentity.from_invocation(request_config, context)
    return handle_response(request, identity, cf_record["response"], location_cache, TIMEOUT_MS)
