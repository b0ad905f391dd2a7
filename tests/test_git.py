import pytest

from promptsegments.core import COLOR_BACKGROUND, FileInfo, Properties
from promptsegments.git import (
    AHEAD_AND_BEHIND_COLOR,
    AHEAD_COLOR,
    AZURE_DEVOPS_ICON,
    BEHIND_COLOR,
    BITBUCKET_ICON,
    BRANCH_AHEAD_ICON,
    BRANCH_BEHIND_ICON,
    BRANCH_GONE_ICON,
    BRANCH_IDENTICAL_ICON,
    BRANCH_MAX_LENGTH,
    DISPLAY_STATUS,
    DISPLAY_STATUS_DETAIL,
    GIT_ICON,
    GITHUB_ICON,
    GITLAB_ICON,
    LOCAL_CHANGES_COLOR,
    LOCAL_WORKING_ICON,
    STATUS_COLORS_ENABLED,
    WORKING_COLOR,
    Git,
    GitRepo,
    GitStatus,
    parse_git_stats,
    parse_git_status_info,
)

CHANGES_COLOR = "#BD8BDE"
PREFIX = ("--no-optional-locks", "-c", "core.quotepath=false", "-c", "color.status=false")


def git_key(*args):
    return ("git", *PREFIX, *args)


class FakeEnv:
    def __init__(self, *, commands=None, files=None, folders=(), dir_files=(),
                 available=("git",), parent=None, folder_lists=None):
        self.commands = dict(commands or {})
        self.files = dict(files or {})
        self.folders = set(folders)
        self.dir_files = set(dir_files)
        self.available = set(available)
        self.parent = parent
        self.folder_lists = dict(folder_lists or {})
        self.calls = []

    def has_command(self, command):
        return command in self.available

    def run_command(self, command, *args):
        self.calls.append((command, *args))
        return self.commands.get((command, *args), "")

    def has_parent_file_path(self, path):
        if self.parent is None:
            raise FileNotFoundError(path)
        return self.parent

    def get_file_content(self, path):
        return self.files.get(path, "")

    def has_folder(self, folder):
        return folder in self.folders

    def has_files_in_dir(self, folder, pattern):
        return (folder, pattern) in self.dir_files

    def get_folders_list(self, path):
        return self.folder_lists.get(path, [])

    def is_wsl(self):
        return False

    def getcwd(self):
        return "/home/user/project"

    def runtime_goos(self):
        return "unix"


def head_git(current_commit="", rebase_merge=False, rebase_apply=False, origin="", onto="",
             step="", total="", branch_name="", tag_name="", cherry_pick=False,
             cherry_pick_sha="", revert=False, revert_sha="", sequencer=False,
             sequencer_todo="", merge=False, merge_head="", merge_msg_start="", status=""):
    folders = set()
    if rebase_merge:
        folders.add("/rebase-merge")
    if rebase_apply:
        folders.add("/rebase-apply")
    if sequencer:
        folders.add("/sequencer")
    files = {
        "/rebase-merge/head-name": origin,
        "/rebase-merge/onto": onto,
        "/rebase-merge/msgnum": step,
        "/rebase-apply/next": step,
        "/rebase-merge/end": total,
        "/rebase-apply/last": total,
        "/rebase-apply/head-name": origin,
        "/CHERRY_PICK_HEAD": cherry_pick_sha,
        "/REVERT_HEAD": revert_sha,
        "/MERGE_MSG": f"{merge_msg_start} '{merge_head}' into {onto}",
        "/sequencer/todo": sequencer_todo,
        "/HEAD": branch_name,
    }
    dir_files = set()
    for flag, name in ((cherry_pick, "CHERRY_PICK_HEAD"), (revert, "REVERT_HEAD"),
                       (merge, "MERGE_MSG"), (merge, "MERGE_HEAD"), (sequencer, "sequencer/todo")):
        if flag:
            dir_files.add(("", name))
    commands = {
        git_key("rev-parse", "--short", "HEAD"): current_commit,
        git_key("describe", "--tags", "--exact-match"): tag_name,
        git_key("name-rev", "--name-only", "--exclude=tags/*", origin): origin,
        git_key("name-rev", "--name-only", "--exclude=tags/*", onto): onto,
        git_key("branch", "--show-current"): branch_name,
        git_key("status", "-unormal", "--short", "--branch"): status,
    }
    env = FakeEnv(commands=commands, files=files, folders=folders, dir_files=dir_files)
    return Git(Properties(), env, GitRepo(git_working_folder=""))


def test_enabled_git_not_found():
    g = Git(Properties(), FakeEnv(available=()))
    assert g.enabled() is False


def test_enabled_no_git_folder():
    g = Git(Properties(), FakeEnv())
    assert g.enabled() is False


def test_enabled_in_working_directory():
    info = FileInfo(path="/dir/hello", parent_folder="/dir", is_dir=True)
    g = Git(Properties(), FakeEnv(parent=info))
    assert g.enabled() is True
    assert g.repo.git_working_folder == "/dir/hello"
    assert g.repo.git_root_folder == "/dir/hello"


def test_enabled_in_working_tree():
    info = FileInfo(path="/dir/hello", parent_folder="/dir", is_dir=False)
    env = FakeEnv(parent=info, files={"/dir/hello": "gitdir: /dir/hello/burp/burp"})
    g = Git(Properties(), env)
    assert g.enabled() is True
    assert g.repo.git_working_folder == "/dir/hello/burp/burp"


def test_enabled_in_real_worktree_strips_worktrees_part():
    info = FileInfo(path="/wt/.git", parent_folder="/wt", is_dir=False)
    env = FakeEnv(parent=info, files={"/wt/.git": "gitdir: /repo/.git/worktrees/feature\n"})
    g = Git(Properties(), env)
    assert g.enabled() is True
    assert g.repo.git_root_folder == "/repo/.git"
    assert g.repo.is_work_tree is True


def test_enabled_worktree_without_pointer():
    info = FileInfo(path="/wt/.git", parent_folder="/wt", is_dir=False)
    g = Git(Properties(), FakeEnv(parent=info, files={"/wt/.git": "garbage"}))
    assert g.enabled() is False


def test_get_git_output_for_command():
    want = "je suis le output"
    env = FakeEnv(commands={git_key("symbolic-ref", "--short", "HEAD"): want})
    g = Git(Properties(), env)
    assert g.get_git_command_output("symbolic-ref", "--short", "HEAD") == want


@pytest.mark.parametrize("kwargs, ref, want", [
    (dict(current_commit="lalasha1"), "", "\uf417lalasha1"),
    (dict(current_commit="whatever", tag_name="lalasha1"), "", "\uf412lalasha1"),
    (dict(current_commit="whatever", rebase_merge=True, origin="cool-feature-bro", onto="main",
          step="2", total="3"), "",
     "\ue728 \ue0a0cool-feature-bro onto \ue0a0main (2/3) at \uf417whatever"),
    (dict(current_commit="whatever", rebase_apply=True, origin="cool-feature-bro",
          step="2", total="3"), "",
     "\ue728 \ue0a0cool-feature-bro (2/3) at \uf417whatever"),
    (dict(current_commit="whatever"), "", "\uf417whatever"),
    (dict(current_commit="whatever", branch_name="main", cherry_pick=True,
          cherry_pick_sha="pickme"), "main", "\ue29b pickme onto \ue0a0main"),
    (dict(current_commit="whatever", tag_name="v3.4.6", cherry_pick=True,
          cherry_pick_sha="pickme"), "", "\ue29b pickme onto \uf412v3.4.6"),
    (dict(current_commit="whatever", branch_name="main", revert=True,
          revert_sha="01234567"), "main", "\uf0e2 012345 onto \ue0a0main"),
    (dict(current_commit="whatever", tag_name="v3.4.6", revert=True,
          revert_sha="01234567"), "", "\uf0e2 012345 onto \uf412v3.4.6"),
    (dict(current_commit="whatever", branch_name="main", sequencer=True,
          sequencer_todo="pick pickme message\npick notme message"), "main",
     "\ue29b pickme onto \ue0a0main"),
    (dict(current_commit="whatever", tag_name="v3.4.6", sequencer=True,
          sequencer_todo="pick pickme message\npick notme message"), "",
     "\ue29b pickme onto \uf412v3.4.6"),
    (dict(current_commit="whatever", branch_name="main", sequencer=True,
          sequencer_todo="revert 01234567 message\nrevert notme message"), "main",
     "\uf0e2 012345 onto \ue0a0main"),
    (dict(current_commit="whatever", tag_name="v3.4.6", sequencer=True,
          sequencer_todo="revert 01234567 message\nrevert notme message"), "",
     "\uf0e2 012345 onto \uf412v3.4.6"),
    (dict(merge=True, merge_head="feat", merge_msg_start="Merge branch"), "main",
     "\ue727 \ue0a0feat into \ue0a0main"),
    (dict(merge=True, merge_head="feat", merge_msg_start="Merge remote-tracking branch"), "main",
     "\ue727 \ue0a0feat into \ue0a0main"),
    (dict(merge=True, merge_head="v7.8.9", merge_msg_start="Merge tag"), "main",
     "\ue727 \uf412v7.8.9 into \ue0a0main"),
    (dict(merge=True, merge_head="8d7e869", merge_msg_start="Merge commit"), "main",
     "\ue727 \uf4178d7e869 into \ue0a0main"),
    (dict(tag_name="v3.4.6", merge=True, merge_head="feat", merge_msg_start="Merge branch"), "",
     "\ue727 \ue0a0feat into \uf412v3.4.6"),
])
def test_get_git_head_context(kwargs, ref, want):
    g = head_git(**kwargs)
    assert g.get_git_head_context(ref) == want


def test_pretty_head_name_no_commits():
    g = head_git()
    assert g.get_pretty_head_name() == "\uf594 "


def test_pretty_head_name_branch_ref():
    g = head_git(branch_name="ref: refs/heads/feature")
    assert g.get_pretty_head_name() == "\ue0a0feature"


@pytest.mark.parametrize("content, expected", [
    ("", 0),
    ("1\n2\n", 2),
    ("1\n2\n3\n4\n\n", 4),
])
def test_get_stash_context(content, expected):
    env = FakeEnv(files={"/logs/refs/stash": content})
    g = Git(Properties(), env, GitRepo(git_working_folder=""))
    assert g.get_stash_context() == expected


def test_get_worktree_context():
    env = FakeEnv(folders={"/repo/worktrees"}, folder_lists={"/repo/worktrees": ["a", "b"]})
    g = Git(Properties(), env, GitRepo(git_root_folder="/repo"))
    assert g.get_worktree_context() == 2


def test_get_worktree_context_without_folder():
    g = Git(Properties(), FakeEnv(), GitRepo(git_root_folder="/repo"))
    assert g.get_worktree_context() == 0


def test_parse_branch_info_equal():
    got = parse_git_status_info("## master...origin/master")
    assert got["local"] == "master"
    assert got["upstream"] == "origin/master"
    assert got["ahead"] == ""
    assert got["behind"] == ""


def test_parse_branch_info_ahead():
    got = parse_git_status_info("## master...origin/master [ahead 1]")
    assert got["local"] == "master"
    assert got["upstream"] == "origin/master"
    assert got["ahead"] == "1"
    assert got["behind"] == ""


def test_parse_branch_info_behind():
    got = parse_git_status_info("## master...origin/master [behind 1]")
    assert got["local"] == "master"
    assert got["upstream"] == "origin/master"
    assert got["behind"] == "1"
    assert got["ahead"] == ""


def test_parse_branch_info_behind_and_ahead():
    got = parse_git_status_info("## master...origin/master [ahead 1, behind 2]")
    assert got["local"] == "master"
    assert got["upstream"] == "origin/master"
    assert got["behind"] == "2"
    assert got["ahead"] == "1"


def test_parse_branch_info_no_remote():
    got = parse_git_status_info("## master")
    assert got["local"] == "master"
    assert got["upstream"] == ""


def test_parse_branch_info_remote_gone():
    got = parse_git_status_info("## test-branch...origin/test-branch [gone]")
    assert got["local"] == "test-branch"
    assert got["upstream_status"] == "gone"


def test_git_status_unmerged():
    assert GitStatus(unmerged=1).render() == " x1"


def test_git_status_unmerged_modified():
    assert GitStatus(unmerged=1, modified=3).render() == " ~3 x1"


def test_git_status_empty():
    assert GitStatus().render() == ""


def test_parse_git_stats_working():
    output = [
        "## amazing-feat", " M change.go", "DD change.go", " ? change.go", " ? change.go",
        " A change.go", " U change.go", " R change.go", " C change.go",
    ]
    status = parse_git_stats(output, True)
    assert status.modified == 3
    assert status.unmerged == 1
    assert status.added == 3
    assert status.deleted == 1
    assert status.changed is True


def test_parse_git_stats_staging():
    output = [
        "## amazing-feat", " M change.go", "DD change.go", " ? change.go", "?? change.go",
        " A change.go", "DU change.go", "MR change.go", "AC change.go",
    ]
    status = parse_git_stats(output, False)
    assert status.modified == 1
    assert status.unmerged == 0
    assert status.added == 1
    assert status.deleted == 2
    assert status.changed is True


def test_parse_git_stats_no_changes():
    status = parse_git_stats(["## amazing-feat"], False)
    assert status == GitStatus()
    assert status.changed is False


def test_parse_git_stats_invalid_line():
    status = parse_git_stats(["## amazing-feat", "#"], False)
    assert status == GitStatus()
    assert status.changed is False


def upstream_git(url, files=None):
    env = FakeEnv(commands={git_key("remote", "get-url", "origin"): url}, files=files)
    props = Properties(values={
        GITHUB_ICON: "GH", GITLAB_ICON: "GL", BITBUCKET_ICON: "BB",
        AZURE_DEVOPS_ICON: "AD", GIT_ICON: "G",
    })
    return Git(props, env, GitRepo(upstream="origin/main"))


@pytest.mark.parametrize("url, icon", [
    ("github.com/test", "GH"),
    ("gitlab.com/test", "GL"),
    ("bitbucket.org/test", "BB"),
    ("dev.azure.com/test", "AD"),
    ("test.visualstudio.com", "AD"),
    ("gitstash.com/test", "G"),
])
def test_get_upstream_symbol(url, icon):
    assert upstream_git(url).get_upstream_symbol() == icon


def test_origin_url_read_from_config():
    config = '[core]\n\tbare = false\n[remote "origin"]\n\turl = git@gitlab.example.com:team/project.git\n'
    g = upstream_git("github.com/test", files={"/config": config})
    assert g.get_origin_url("origin") == "git@gitlab.example.com:team/project.git"
    assert g.get_upstream_symbol() == "GL"


def test_origin_url_falls_back_to_command():
    g = upstream_git("bitbucket.org/test", files={"/config": "[core]\n\tbare = false\n"})
    assert g.get_origin_url("origin") == "bitbucket.org/test"


def status_git(values, **repo):
    return Git(Properties(values=values), FakeEnv(), GitRepo(**repo))


def test_status_color_local_changes_staging():
    g = status_git({LOCAL_CHANGES_COLOR: CHANGES_COLOR}, staging=GitStatus(changed=True))
    assert g.get_status_color("#fg1111") == CHANGES_COLOR


def test_status_color_local_changes_working():
    g = status_git({LOCAL_CHANGES_COLOR: CHANGES_COLOR}, working=GitStatus(changed=True))
    assert g.get_status_color("#fg1111") == CHANGES_COLOR


def test_status_color_ahead_and_behind():
    g = status_git({AHEAD_AND_BEHIND_COLOR: CHANGES_COLOR}, ahead=1, behind=3)
    assert g.get_status_color("#fg1111") == CHANGES_COLOR


def test_status_color_ahead():
    g = status_git({AHEAD_COLOR: CHANGES_COLOR}, ahead=1)
    assert g.get_status_color("#fg1111") == CHANGES_COLOR


def test_status_color_behind():
    g = status_git({BEHIND_COLOR: CHANGES_COLOR}, behind=5)
    assert g.get_status_color("#fg1111") == CHANGES_COLOR


def test_status_color_default():
    g = status_git({BEHIND_COLOR: CHANGES_COLOR})
    assert g.get_status_color("#abcdef") == "#abcdef"


def test_set_status_color_foreground():
    g = status_git({LOCAL_CHANGES_COLOR: CHANGES_COLOR, COLOR_BACKGROUND: False},
                   staging=GitStatus(changed=True))
    g.props.foreground = "#ffffff"
    g.props.background = "#111111"
    g.set_status_color()
    assert g.props.foreground == CHANGES_COLOR
    assert g.props.background == "#111111"


def test_set_status_color_background():
    g = status_git({LOCAL_CHANGES_COLOR: CHANGES_COLOR, COLOR_BACKGROUND: True},
                   staging=GitStatus(changed=True))
    g.props.foreground = "#ffffff"
    g.props.background = "#111111"
    g.set_status_color()
    assert g.props.background == CHANGES_COLOR
    assert g.props.foreground == "#ffffff"


def test_status_colors_without_display_status():
    g = head_git(status="## main...origin/main [ahead 33]\n M myfile")
    g.props = Properties(values={
        DISPLAY_STATUS: False,
        STATUS_COLORS_ENABLED: True,
        LOCAL_CHANGES_COLOR: CHANGES_COLOR,
    })
    g.render()
    assert g.props.background == CHANGES_COLOR


def test_render_with_status():
    g = head_git(status="## main...origin/main [ahead 1]\n M file\nA  new")
    g.props = Properties(values={DISPLAY_STATUS: True})
    assert g.render() == "\ue0a0main \u21911 \uf046 +1 | \uf044 ~1"
    assert g.repo.upstream == "origin/main"
    assert g.repo.ahead == 1


def test_render_without_status_shows_head():
    g = head_git(current_commit="abc1234")
    assert g.render() == "\uf417abc1234"


def detail_git(values):
    return Git(Properties(values=values, foreground="#111111"), FakeEnv())


@pytest.mark.parametrize("values, expected", [
    ({}, "icon +1"),
    ({WORKING_COLOR: "#123456"}, "<#123456>icon +1</>"),
    ({WORKING_COLOR: "#123456", LOCAL_WORKING_ICON: "<#789123>work</>"}, "<#789123>work</><#123456> +1</>"),
    ({WORKING_COLOR: "#123456", LOCAL_WORKING_ICON: "work"}, "<#123456>work +1</>"),
    ({DISPLAY_STATUS_DETAIL: False}, "icon"),
    ({DISPLAY_STATUS_DETAIL: False, WORKING_COLOR: "#123456"}, "<#123456>icon</>"),
])
def test_get_status_detail_string(values, expected):
    status = GitStatus(changed=True, added=1)
    g = detail_git(values)
    assert g.get_status_detail_string(status, WORKING_COLOR, LOCAL_WORKING_ICON, "icon") == expected


@pytest.mark.parametrize("ahead, behind, upstream, expected", [
    (0, 0, "main", " equal"),
    (2, 0, "", " up2"),
    (0, 8, "", " down8"),
    (7, 8, "", " up7 down8"),
    (0, 0, "", " gone"),
    (0, -8, "wonky", ""),
])
def test_get_branch_status(ahead, behind, upstream, expected):
    props = Properties(values={
        BRANCH_AHEAD_ICON: "up", BRANCH_BEHIND_ICON: "down",
        BRANCH_IDENTICAL_ICON: "equal", BRANCH_GONE_ICON: "gone",
    })
    g = Git(props, FakeEnv(), GitRepo(ahead=ahead, behind=behind, upstream=upstream))
    assert g.get_branch_status() == expected


@pytest.mark.parametrize("branch, max_length, expected", [
    ("all-your-base-are-belong-to-us", None, "all-your-base-are-belong-to-us"),
    ("all-your-base-are-belong-to-us", 13.0, "all-your-base"),
    ("all-your-base", 13.0, "all-your-base"),
    ("all-your-base", "burp", "all-your-base"),
    ("all-your-base", 20.0, "all-your-base"),
])
def test_truncate_branch(branch, max_length, expected):
    g = Git(Properties(values={BRANCH_MAX_LENGTH: max_length}), FakeEnv())
    assert g.truncate_branch(branch) == expected