"""ghsync: incremental replication of GitHub issues, pull requests and discussions."""
