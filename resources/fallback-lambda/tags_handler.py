import os
from dataclasses import dataclass
from typing import Dict, Optional

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

FALLBACK_TAG_KEY = os.environ.get("FALLBACK_TAG_KEY", "FallbackLocation")
CLOUDFRONT_REGION = os.environ.get("CLOUDFRONT_REGION", "us-east-1")
DISTRIBUTION_ARN_FORMAT = "arn:aws:cloudfront::{account_id}:distribution/{distribution_id}"
log = Logger(child=True)


class ResolutionError(Exception):
    """The tags of a distribution could not be read."""

    def __init__(self, resource_arn: str, message: str):
        super().__init__(f"Could not read tags of {resource_arn}: {message}")
        self.resource_arn = resource_arn


@dataclass(frozen=True)
class DistributionIdentity:
    account_id: str
    distribution_id: str

    @property
    def arn(self) -> str:
        return distribution_arn(self.account_id, self.distribution_id)

    @classmethod
    def from_invocation(cls, config, context) -> "DistributionIdentity":
        # Lambda@Edge can't be attached cross-account, so the account of this
        # function is the account of the distribution.
        account_id = context.invoked_function_arn.split(":")[4]
        return DistributionIdentity(
            account_id=account_id,
            distribution_id=config["distributionId"],
        )


def distribution_arn(account_id: str, distribution_id: str) -> str:
    return DISTRIBUTION_ARN_FORMAT.format(account_id=account_id, distribution_id=distribution_id)


class TagsHandler:
    def __init__(self, cloudfront_client=None, tag_key: str = FALLBACK_TAG_KEY):
        self.cloudfront_client = cloudfront_client or boto3.client("cloudfront", region_name=CLOUDFRONT_REGION)
        self.tag_key = tag_key

    def get_tags(self, resource_arn: str) -> Dict[str, str]:
        try:
            response = self.cloudfront_client.list_tags_for_resource(Resource=resource_arn)
        except ClientError as e:
            raise ResolutionError(resource_arn, e.response.get("Error", {}).get("Message", str(e))) from e
        except BotoCoreError as e:
            raise ResolutionError(resource_arn, str(e)) from e

        tag_list = response.get("Tags", {}).get("Items", [])
        return {tag["Key"]: tag["Value"] for tag in tag_list}

    def get_fallback_location(self, account_id: str, distribution_id: str) -> Optional[str]:
        resource_arn = distribution_arn(account_id, distribution_id)
        log.info(f"Reading tags of {resource_arn}")
        tags = self.get_tags(resource_arn)
        return tags.get(self.tag_key)
