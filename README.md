# promptsegments

Building blocks for a shell prompt. Each segment looks at the current
environment and decides whether it should be shown (`enabled()`). If it
should, `render()` gives the text to show. Segments read their settings
from a `Properties` object. Segments that change colour do so by setting
`foreground` or `background` on that object.

## Installation

```
pip install promptsegments
```

The `test` extra installs pytest for running the test suite.

## Segments

| Module | Class | Shows |
| --- | --- | --- |
| `promptsegments.git` | `Git` | branch, upstream, ahead/behind, staged and working changes, rebase/merge/cherry-pick state |
| `promptsegments.executiontime` | `ExecutionTime` | duration of the last command, in one of several `DurationStyle`s |
| `promptsegments.exitcode` | `Exit` | last exit code, or its meaning such as `SIGINT` |
| `promptsegments.envvar` | `EnvVar` | value of an environment variable |
| `promptsegments.command` | `Command` | output of a shell command; `\|\|` keeps the first non-empty result and `&&` joins the results |
| `promptsegments.memory` | `Memory` | memory or swap usage as a percentage (read with psutil) |
| `promptsegments.battery` | `Battery` | combined battery charge and state |
| `promptsegments.az` | `Az` | active Azure subscription, from `AZ_*` variables or `az account show` |
| `promptsegments.kubectl` | `Kubectl` | Kubernetes context and namespace |
| `promptsegments.nbgv` | `Nbgv` | Nerdbank.GitVersioning version |
| `promptsegments.language` | `Language` | version of a tool, when matching project files are present |

Every segment class is built as `Segment(props, env)`.

## Shared pieces

`promptsegments.core` holds:

- `Properties`: configuration values plus `foreground` and `background`,
  with typed lookups that fall back to a default (`get_string`, `get_bool`,
  `get_int`, `get_float`, `get_color`).
- `Environment`: a protocol describing what segments ask of the shell:
  `getenv`, `getcwd`, `home_dir`, `has_command`, `run_command`,
  `run_shell_command`, `has_files`, `has_files_in_dir`, `has_folder`,
  `has_parent_file_path`, `get_file_content`, `get_folders_list`,
  `execution_time`, `last_error_code`, `get_battery_info`, `is_wsl` and
  `runtime_goos`.
- `FileInfo` and the errors `CommandError`, `NoBatteryError` and
  `TemplateError`.
- `find_named_regex_match`, `replace_all_string`, and `render_template`
  for the small `{{ .Field }}` templates (with `if`/`else`/`end`, `not`,
  `eq`, `lt`, `gt` and friends) that some segments use.

## Durations

```python
from promptsegments.executiontime import DurationStyle, format_duration

format_duration(13371337, DurationStyle.AUSTIN)     # '3h 42m 51.337s'
format_duration(14582100, DurationStyle.AMARILLO)   # '14,582.1s'
format_duration(14582100, DurationStyle.GALVESTON)  # '04:03:02'
```

An unknown style gives `Style: <name> is not available`.

## Language versions

`Language` is configured with file patterns and a list of
`VersionCommand`s. It is enabled when files matching a pattern are in the
current directory, and by default not in the home directory
(`home_enabled`). The `display_mode` property changes when it is shown:
`always`, `files` (the default), `environment` or `context`.

```python
from promptsegments.core import Properties
from promptsegments.language import Language, VersionCommand

go = Language(
    props=Properties(),
    env=my_environment,
    extensions=["*.go", "go.mod"],
    commands=[VersionCommand("go", ["version"], r"go(?P<version>(?P<major>\d+)\.(?P<minor>\d+))")],
)
if go.enabled():
    print(go.render())
```

The first command that is installed and prints something is used. If its
output does not match, or it exits with an error, the error text is
rendered unless `display_error` is false. When `enable_hyperlink` is set,
the version is formatted through `version_url_template`.

## What this package does not do

- It has no ready-made segments for particular languages; each one is a
  `Language` configured by the caller, as above.
- It ships no implementation of `Environment`: the caller supplies an
  object that reads files, environment variables and runs commands.
- It has no command-line program and does not assemble or print a whole
  prompt; it only provides the individual segments.