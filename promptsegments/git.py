"""Segment showing the state of the git repository in the current folder."""

from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from typing import Optional

from .core import (
    COLOR_BACKGROUND,
    WINDOWS_PLATFORM,
    CommandError,
    Environment,
    Properties,
    find_named_regex_match,
    replace_all_string,
)

BRANCH_ICON = "branch_icon"
DISPLAY_BRANCH_STATUS = "display_branch_status"
BRANCH_IDENTICAL_ICON = "branch_identical_icon"
BRANCH_AHEAD_ICON = "branch_ahead_icon"
BRANCH_BEHIND_ICON = "branch_behind_icon"
BRANCH_GONE_ICON = "branch_gone_icon"
LOCAL_WORKING_ICON = "local_working_icon"
LOCAL_STAGING_ICON = "local_staged_icon"
DISPLAY_STATUS = "display_status"
DISPLAY_STATUS_DETAIL = "display_status_detail"
REBASE_ICON = "rebase_icon"
CHERRY_PICK_ICON = "cherry_pick_icon"
REVERT_ICON = "revert_icon"
COMMIT_ICON = "commit_icon"
NO_COMMITS_ICON = "no_commits_icon"
TAG_ICON = "tag_icon"
DISPLAY_STASH_COUNT = "display_stash_count"
STASH_COUNT_ICON = "stash_count_icon"
STATUS_SEPARATOR_ICON = "status_separator_icon"
MERGE_ICON = "merge_icon"
DISPLAY_UPSTREAM_ICON = "display_upstream_icon"
GITHUB_ICON = "github_icon"
BITBUCKET_ICON = "bitbucket_icon"
AZURE_DEVOPS_ICON = "azure_devops_icon"
GITLAB_ICON = "gitlab_icon"
GIT_ICON = "git_icon"
WORKING_COLOR = "working_color"
STAGING_COLOR = "staging_color"
STATUS_COLORS_ENABLED = "status_colors_enabled"
LOCAL_CHANGES_COLOR = "local_changes_color"
AHEAD_AND_BEHIND_COLOR = "ahead_and_behind_color"
BEHIND_COLOR = "behind_color"
AHEAD_COLOR = "ahead_color"
BRANCH_MAX_LENGTH = "branch_max_length"
DISPLAY_WORKTREE_COUNT = "display_worktree_count"
WORKTREE_COUNT_ICON = "worktree_count_icon"

GIT_COMMAND_PREFIX = ("--no-optional-locks", "-c", "core.quotepath=false", "-c", "color.status=false")

_BRANCH_REGEX = (
    r"^## (?P<local>\S+?)(\.{3}(?P<upstream>\S+?)( \[(?P<upstream_status>"
    r"(ahead (?P<ahead>\d+)(, )?)?(behind (?P<behind>\d+))?(gone)?)])?)?$"
)
_MERGE_REGEX = r"Merge (?P<type>(remote-tracking )?branch|commit|tag) '(?P<head>.*)' into"
_SEQUENCER_REGEX = r"^(?P<action>p|pick|revert)\s+(?P<sha>\S+)"
_GITDIR_REGEX = r"^gitdir: (?P<dir>.*)$"
_TRIM = " \r\n"


@dataclass
class GitStatus:
    """Counts of changes in the working tree or the index."""

    unmerged: int = 0
    deleted: int = 0
    added: int = 0
    modified: int = 0
    changed: bool = False

    def render(self) -> str:
        parts = (
            (self.added, "+"),
            (self.modified, "~"),
            (self.deleted, "-"),
            (self.unmerged, "x"),
        )
        return "".join(f" {prefix}{value}" for value, prefix in parts if value > 0)


@dataclass
class GitRepo:
    working: GitStatus = field(default_factory=GitStatus)
    staging: GitStatus = field(default_factory=GitStatus)
    ahead: int = 0
    behind: int = 0
    head: str = ""
    upstream: str = ""
    stash_count: int = 0
    git_working_folder: str = ""
    is_work_tree: bool = False
    git_root_folder: str = ""
    worktree_count: int = 0


def parse_git_stats(output: list[str], working: bool) -> GitStatus:
    """Count changes from 'git status --short' lines, skipping the branch line."""
    status = GitStatus()
    for line in output[1:]:
        if len(line) < 2:
            continue
        code = line[1] if working else line[0]
        if code == "?":
            if working:
                status.added += 1
        elif code == "D":
            status.deleted += 1
        elif code == "A":
            status.added += 1
        elif code == "U":
            status.unmerged += 1
        elif code in ("M", "R", "C", "m"):
            status.modified += 1
    status.changed = any((status.added, status.deleted, status.modified, status.unmerged))
    return status


def parse_git_status_info(branch_info: str) -> dict[str, str]:
    """Parse the '## branch...upstream [ahead n, behind m]' status line."""
    return find_named_regex_match(_BRANCH_REGEX, branch_info)


class Git:
    """Shows the branch, its upstream state and local changes."""

    def __init__(self, props: Properties, env: Environment, repo: Optional[GitRepo] = None):
        self.props = props
        self.env = env
        self.repo = repo if repo is not None else GitRepo()

    def enabled(self) -> bool:
        if not self.env.has_command("git"):
            return False
        try:
            gitdir = self.env.has_parent_file_path(".git")
        except OSError:
            return False
        if gitdir is None:
            return False
        self.repo = GitRepo()
        if gitdir.is_dir:
            self.repo.git_working_folder = gitdir.path
            self.repo.git_root_folder = gitdir.path
            return True
        # a worktree: the .git file points at the real folder
        self.repo.git_root_folder = gitdir.path
        pointer = self.env.get_file_content(gitdir.path).strip(_TRIM)
        matches = find_named_regex_match(_GITDIR_REGEX, pointer)
        folder = matches.get("dir", "")
        if not folder:
            return False
        self.repo.git_working_folder = folder
        index = folder.rfind("/.git/worktrees")
        self.repo.git_root_folder = folder[: index + 5]
        self.repo.is_work_tree = True
        return True

    def render(self) -> str:
        status_colors = self.props.get_bool(STATUS_COLORS_ENABLED, False)
        display_status = self.props.get_bool(DISPLAY_STATUS, False)
        if display_status or status_colors:
            self.set_git_status()
        if status_colors:
            self.set_status_color()
        if not display_status:
            return self.get_pretty_head_name()

        repo = self.repo
        parts: list[str] = []
        if repo.upstream and self.props.get_bool(DISPLAY_UPSTREAM_ICON, False):
            parts.append(self.get_upstream_symbol())
        parts.append(repo.head)
        if self.props.get_bool(DISPLAY_BRANCH_STATUS, True):
            parts.append(self.get_branch_status())
        if repo.staging.changed:
            parts.append(self.get_status_detail_string(repo.staging, STAGING_COLOR, LOCAL_STAGING_ICON, " \uF046"))
        if repo.staging.changed and repo.working.changed:
            parts.append(self.props.get_string(STATUS_SEPARATOR_ICON, " |"))
        if repo.working.changed:
            parts.append(self.get_status_detail_string(repo.working, WORKING_COLOR, LOCAL_WORKING_ICON, " \uF044"))
        if repo.stash_count:
            parts.append(f" {self.props.get_string(STASH_COUNT_ICON, chr(0xF692) + ' ')}{repo.stash_count}")
        if repo.worktree_count:
            parts.append(f" {self.props.get_string(WORKTREE_COUNT_ICON, chr(0xF1BB) + ' ')}{repo.worktree_count}")
        return "".join(parts)

    def get_branch_status(self) -> str:
        repo = self.repo
        ahead_icon = self.props.get_string(BRANCH_AHEAD_ICON, "\u2191")
        behind_icon = self.props.get_string(BRANCH_BEHIND_ICON, "\u2193")
        if repo.ahead > 0 and repo.behind > 0:
            return f" {ahead_icon}{repo.ahead} {behind_icon}{repo.behind}"
        if repo.ahead > 0:
            return f" {ahead_icon}{repo.ahead}"
        if repo.behind > 0:
            return f" {behind_icon}{repo.behind}"
        if repo.behind == 0 and repo.ahead == 0 and repo.upstream:
            return f" {self.props.get_string(BRANCH_IDENTICAL_ICON, chr(0x2261))}"
        if not repo.upstream:
            return f" {self.props.get_string(BRANCH_GONE_ICON, chr(0x2262))}"
        return ""

    def get_status_detail_string(self, status: GitStatus, color: str, icon: str, default_icon: str) -> str:
        prefix = self.props.get_string(icon, default_icon)
        foreground = self.props.get_color(color, self.props.foreground)
        if not self.props.get_bool(DISPLAY_STATUS_DETAIL, True):
            return self.color_status_string(prefix, "", foreground)
        return self.color_status_string(prefix, status.render(), foreground)

    def color_status_string(self, prefix: str, status: str, color: str) -> str:
        if color == self.props.foreground:
            return f"{prefix}{status}"
        if "</>" in prefix:
            return f"{prefix}<{color}>{status}</>"
        return f"<{color}>{prefix}{status}</>"

    def get_upstream_symbol(self) -> str:
        remote = replace_all_string("/.*", self.repo.upstream, "")
        url = self.get_origin_url(remote)
        if "github" in url:
            return self.props.get_string(GITHUB_ICON, "\uF408 ")
        if "gitlab" in url:
            return self.props.get_string(GITLAB_ICON, "\uF296 ")
        if "bitbucket" in url:
            return self.props.get_string(BITBUCKET_ICON, "\uF171 ")
        if "dev.azure.com" in url or "visualstudio.com" in url:
            return self.props.get_string(AZURE_DEVOPS_ICON, "\uFD03 ")
        return self.props.get_string(GIT_ICON, "\uE5FB ")

    def set_git_status(self) -> None:
        output = self.get_git_command_output("status", "-unormal", "--short", "--branch")
        lines = output.split("\n")
        self.repo.working = parse_git_stats(lines, True)
        self.repo.staging = parse_git_stats(lines, False)
        status = parse_git_status_info(lines[0])
        if status.get("local"):
            self.repo.ahead = int(status["ahead"]) if status.get("ahead") else 0
            self.repo.behind = int(status["behind"]) if status.get("behind") else 0
            if status.get("upstream_status") != "gone":
                self.repo.upstream = status.get("upstream", "")
        self.repo.head = self.get_git_head_context(status.get("local", ""))
        if self.props.get_bool(DISPLAY_STASH_COUNT, False):
            self.repo.stash_count = self.get_stash_context()
        if self.props.get_bool(DISPLAY_WORKTREE_COUNT, False):
            self.repo.worktree_count = self.get_worktree_context()

    def set_status_color(self) -> None:
        if self.props.get_bool(COLOR_BACKGROUND, True):
            self.props.background = self.get_status_color(self.props.background)
        else:
            self.props.foreground = self.get_status_color(self.props.foreground)

    def get_status_color(self, default_value: str) -> str:
        repo = self.repo
        if repo.staging.changed or repo.working.changed:
            return self.props.get_color(LOCAL_CHANGES_COLOR, default_value)
        if repo.ahead > 0 and repo.behind > 0:
            return self.props.get_color(AHEAD_AND_BEHIND_COLOR, default_value)
        if repo.ahead > 0:
            return self.props.get_color(AHEAD_COLOR, default_value)
        if repo.behind > 0:
            return self.props.get_color(BEHIND_COLOR, default_value)
        return default_value

    def get_git_command_output(self, *args: str) -> str:
        in_wsl_shared_drive = self.env.is_wsl() and self.env.getcwd().startswith("/mnt/")
        executable = "git"
        if self.env.runtime_goos() == WINDOWS_PLATFORM or in_wsl_shared_drive:
            executable = "git.exe"
        try:
            return self.env.run_command(executable, *GIT_COMMAND_PREFIX, *args)
        except (CommandError, OSError):
            return ""

    def get_git_head_context(self, ref: str) -> str:
        branch_icon = self.props.get_string(BRANCH_ICON, "\uE0A0")
        if not ref:
            ref = self.get_pretty_head_name()
        else:
            ref = f"{branch_icon}{self.truncate_branch(ref)}"

        folder = self.repo.git_working_folder
        if self.env.has_folder(folder + "/rebase-merge"):
            head = self._git_file(folder, "rebase-merge/head-name")
            origin = self.truncate_branch(head.replace("refs/heads/", "", 1))
            onto = self.truncate_branch(self._git_ref_symbolic_name("rebase-merge/onto"))
            step = self._git_file(folder, "rebase-merge/msgnum")
            total = self._git_file(folder, "rebase-merge/end")
            icon = self.props.get_string(REBASE_ICON, "\uE728 ")
            return f"{icon}{branch_icon}{origin} onto {branch_icon}{onto} ({step}/{total}) at {ref}"
        if self.env.has_folder(folder + "/rebase-apply"):
            head = self._git_file(folder, "rebase-apply/head-name")
            origin = self.truncate_branch(head.replace("refs/heads/", "", 1))
            step = self._git_file(folder, "rebase-apply/next")
            total = self._git_file(folder, "rebase-apply/last")
            icon = self.props.get_string(REBASE_ICON, "\uE728 ")
            return f"{icon}{branch_icon}{origin} ({step}/{total}) at {ref}"

        if self._has_git_file("MERGE_MSG") and self._has_git_file("MERGE_HEAD"):
            icon = self.props.get_string(MERGE_ICON, "\uE727 ")
            matches = find_named_regex_match(_MERGE_REGEX, self._git_file(folder, "MERGE_MSG"))
            if matches.get("head"):
                kind = matches.get("type")
                if kind == "tag":
                    head_icon = self.props.get_string(TAG_ICON, "\uF412")
                elif kind == "commit":
                    head_icon = self.props.get_string(COMMIT_ICON, "\uF417")
                else:
                    head_icon = branch_icon
                return f"{icon}{head_icon}{self.truncate_branch(matches['head'])} into {ref}"

        # A committed conflict resolution in the middle of a pick sequence leaves
        # no CHERRY_PICK_HEAD/REVERT_HEAD, so the todo file is consulted too.
        cherry_icon = self.props.get_string(CHERRY_PICK_ICON, "\uE29B ")
        revert_icon = self.props.get_string(REVERT_ICON, "\uF0E2 ")
        if self._has_git_file("CHERRY_PICK_HEAD"):
            sha = self._git_file(folder, "CHERRY_PICK_HEAD")
            return f"{cherry_icon}{sha[:6]} onto {ref}"
        if self._has_git_file("REVERT_HEAD"):
            sha = self._git_file(folder, "REVERT_HEAD")
            return f"{revert_icon}{sha[:6]} onto {ref}"
        if self._has_git_file("sequencer/todo"):
            matches = find_named_regex_match(_SEQUENCER_REGEX, self._git_file(folder, "sequencer/todo"))
            sha = matches.get("sha", "")
            if sha:
                action = matches.get("action")
                if action in ("p", "pick"):
                    return f"{cherry_icon}{sha[:6]} onto {ref}"
                if action == "revert":
                    return f"{revert_icon}{sha[:6]} onto {ref}"
        return ref

    def truncate_branch(self, branch: str) -> str:
        max_length = self.props.get_int(BRANCH_MAX_LENGTH, 0)
        if max_length == 0 or len(branch) < max_length:
            return branch
        return branch[:max_length]

    def _has_git_file(self, name: str) -> bool:
        return self.env.has_files_in_dir(self.repo.git_working_folder, name)

    def _git_file(self, folder: str, name: str) -> str:
        return self.env.get_file_content(folder + "/" + name).strip(_TRIM)

    def _git_ref_symbolic_name(self, ref_file: str) -> str:
        ref = self._git_file(self.repo.git_working_folder, ref_file)
        return self.get_git_command_output("name-rev", "--name-only", "--exclude=tags/*", ref)

    def get_pretty_head_name(self) -> str:
        head = self._git_file(self.repo.git_working_folder, "HEAD")
        branch_prefix = "ref: refs/heads/"
        ref = head[len(branch_prefix):] if head.startswith(branch_prefix) else ""
        if ref:
            return f"{self.props.get_string(BRANCH_ICON, chr(0xE0A0))}{self.truncate_branch(ref)}"
        tag = self.get_git_command_output("describe", "--tags", "--exact-match")
        if tag:
            return f"{self.props.get_string(TAG_ICON, chr(0xF412))}{tag}"
        commit = self.get_git_command_output("rev-parse", "--short", "HEAD")
        if not commit:
            return self.props.get_string(NO_COMMITS_ICON, "\uF594 ")
        return f"{self.props.get_string(COMMIT_ICON, chr(0xF417))}{commit}"

    def get_stash_context(self) -> int:
        content = self._git_file(self.repo.git_root_folder, "logs/refs/stash")
        if not content:
            return 0
        return len(content.split("\n"))

    def get_worktree_context(self) -> int:
        folder = self.repo.git_root_folder + "/worktrees"
        if not self.env.has_folder(folder):
            return 0
        return len(self.env.get_folders_list(folder))

    def get_origin_url(self, upstream: str) -> str:
        content = self.env.get_file_content(self.repo.git_root_folder + "/config")
        parser = configparser.ConfigParser(strict=False, interpolation=None, allow_no_value=True)
        url = ""
        try:
            parser.read_string(content)
            url = parser.get(f'remote "{upstream}"', "url", fallback="") or ""
        except configparser.Error:
            url = ""
        if not url:
            return self.get_git_command_output("remote", "get-url", upstream)
        return url