"""GraphQL documents used against the GitHub API.

Collections are requested in ascending `updatedAt` order; the sync engine relies on it.
"""

_ITEM_FIELDS = """
          id number title {state}url body createdAt updatedAt
          author {{ login }}
          labels(first: 20) {{ nodes {{ name }} }}
          comments {{ totalCount }}
"""

_COLLECTION_QUERY = """
  query {operation}($owner: String!, $name: String!, $pageSize: Int!, $cursor: String) {{
    rateLimit {{ remaining resetAt }}
    repository(owner: $owner, name: $name) {{
      {collection}(
        first: $pageSize, after: $cursor, orderBy: {{ field: UPDATED_AT, direction: ASC }}
      ) {{
        nodes {{{fields}        }}
        pageInfo {{ endCursor hasNextPage }}
      }}
    }}
  }}
"""


def _collection_query(operation: str, collection: str, with_state: bool) -> str:
    fields = _ITEM_FIELDS.format(state="state " if with_state else "")
    return _COLLECTION_QUERY.format(operation=operation, collection=collection, fields=fields)


ISSUES_QUERY = _collection_query("RepoIssues", "issues", with_state=True)
PULL_REQUESTS_QUERY = _collection_query("RepoPullRequests", "pullRequests", with_state=True)
# Discussions have no state field upstream
DISCUSSIONS_QUERY = _collection_query("RepoDiscussions", "discussions", with_state=False)

_COMMENT_CONNECTION = """
        comments(first: $pageSize, after: $cursor) {
          nodes { id body createdAt updatedAt author { login } }
          pageInfo { endCursor hasNextPage }
        }"""

NODE_COMMENTS_QUERY = (
    """
  query NodeComments($id: ID!, $pageSize: Int!, $cursor: String) {
    rateLimit { remaining resetAt }
    node(id: $id) {
      ... on Issue {"""
    + _COMMENT_CONNECTION
    + """
      }
      ... on PullRequest {"""
    + _COMMENT_CONNECTION
    + """
      }
      ... on Discussion {"""
    + _COMMENT_CONNECTION
    + """
      }
    }
  }
"""
)
