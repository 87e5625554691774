from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor

import pytest

from location_cache import LocationCache


@dataclass
class LambdaContext:
    function_name: str = "fallback_lambda"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:eu-west-1:123456789012:function:lambda_name"
    aws_request_id: str = "da658bd3-2d6f-4e7b-8ec2-937234644fdc"


def cf_response_event(method="GET", host="www.example.org", uri="/picture.jpg", query="size=large", status=200):
    return {
        "Records": [
            {
                "cf": {
                    "config": {
                        "distributionDomainName": "d123.cloudfront.net",
                        "distributionId": "EDFDVBD6EXAMPLE",
                        "eventType": "origin-response",
                        "requestId": "xGN7KWpVEmB9Dp7ctcVFQC4E-nrcOcEKS3QyAez--06dV7TEXAMPLE==",
                    },
                    "request": {
                        "clientIp": "2001:0db8:85a3:0:0:8a2e:0370:7334",
                        "method": method,
                        "uri": uri,
                        "querystring": query,
                        "headers": {
                            "host": [{"key": "Host", "value": host}],
                            "user-agent": [{"key": "User-Agent", "value": "curl/7.18.1"}],
                        },
                    },
                    "response": {
                        "status": str(status),
                        "statusDescription": "OK",
                        "headers": {
                            "server": [{"key": "Server", "value": "MyCustomOrigin"}],
                            "set-cookie": [
                                {"key": "Set-Cookie", "value": "theme=light"},
                                {"key": "Set-Cookie", "value": "sessionToken=abc123; Expires=Wed, 09 Jun 2021 10:18:14 GMT"},
                            ],
                        },
                    },
                }
            }
        ]
    }


class FakeResolver:
    """Records calls and answers with a fixed location, or runs a callable."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def __call__(self, account_id, distribution_id):
        self.calls.append((account_id, distribution_id))
        if callable(self.result):
            return self.result(account_id, distribution_id)
        return self.result


@pytest.fixture
def lambda_context():
    return LambdaContext()


@pytest.fixture
def executor():
    with ThreadPoolExecutor(max_workers=4) as pool:
        yield pool


@pytest.fixture
def make_cache(executor):
    def _make(result=None, cache_failures=True):
        resolver = FakeResolver(result)
        return LocationCache(resolver, executor=executor, cache_failures=cache_failures), resolver

    return _make


@pytest.fixture
def response_event():
    return cf_response_event
