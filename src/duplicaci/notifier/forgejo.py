"""Report failed runs as Forgejo issues."""

import logging
import time

import requests

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 30


class NotifierError(Exception):
    """The issue tracker rejected or failed a request."""

    pass


class ForgejoNotifier:
    """Create an issue per failure title, commenting on it while it stays open."""

    def __init__(self, base_url, repo, token, assignee=None, session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.repo = repo
        self.token = token
        self.assignee = assignee
        self.session = session or requests.Session()

    @property
    def issues_url(self) -> str:
        return f"{self.base_url}/api/v1/repos/{self.repo}/issues"

    def _headers(self) -> dict:
        return {"Authorization": f"token {self.token}"}

    def _request(self, method, url, expected_status, **kwargs):
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=TIMEOUT_SECONDS, **kwargs
            )
        except requests.RequestException as e:
            raise NotifierError(f"request to {url} failed: {e}") from e

        if resp.status_code != expected_status:
            raise NotifierError(f"API returned status {resp.status_code}: {resp.text}")
        return resp

    def create_or_update_issue(self, title: str, body: str) -> None:
        """Comment on the open issue with ``title``, or open a new one."""
        issue_number = self.find_existing_issue(title)
        if issue_number:
            self.add_comment(issue_number, body)
        else:
            self.create_issue(title, body)

    def find_existing_issue(self, title: str) -> int:
        """Number of the open issue titled ``title``, or 0."""
        resp = self._request(
            "GET",
            self.issues_url,
            200,
            params={"state": "open", "type": "issues"},
        )
        for issue in resp.json():
            if issue.get("title") == title:
                return issue.get("number", 0)
        return 0

    def create_issue(self, title: str, body: str) -> None:
        payload = {"title": title, "body": body}
        if self.assignee:
            payload["assignees"] = [self.assignee]

        resp = self._request("POST", self.issues_url, 201, json=payload)
        try:
            html_url = resp.json().get("html_url")
        except ValueError:
            html_url = None
        if html_url:
            logger.info("Created issue: %s", html_url)

    def add_comment(self, issue_number: int, body: str) -> None:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S %Z")
        payload = {"body": f"**Update {timestamp}**\n\n{body}"}
        self._request(
            "POST", f"{self.issues_url}/{issue_number}/comments", 201, json=payload
        )
        logger.info("Added comment to issue #%d", issue_number)
