from typing import Literal


existing_kinds = Literal["bucket_policy_member"]


existing_cloud_providers = Literal["gcp"]
