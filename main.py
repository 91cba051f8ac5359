from policybind import BucketPolicyMember, Reconciler, universal_connector



def main():
    # Example usage of the universal connector
    gcp_config = {"project_id": "my-gcp-project"}
    member = BucketPolicyMember(
        name="analytics-readers",
        spec={"for_provider": {
            "bucket": "my-analytics-bucket",
            "role": "roles/storage.objectViewer",
            "member": "group:analytics@example.com",
        }},
    )

    connector = universal_connector("bucket_policy_member", "gcp", gcp_config)
    result = Reconciler(connector).reconcile(member)

    print(f"Action: {result.action.value}")
    print(f"Conditions: {member.status.conditions}")

if __name__ == "__main__":
    main()
