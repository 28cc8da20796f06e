from __future__ import annotations

"""
Shell Integration Scripts.

Renders the shell-side half of the completion protocol for bash, zsh and
fish, and the wrapper script that runs the dispatcher under another name.
Every script is specialised for the reported executable name, so renamed
instances complete independently.
"""

import shlex
from typing import Callable, Dict

from tomecli.core.execution.environment import env_prefix_for
from tomecli.domain.constants import (
    COMPLETE_COMMAND,
    COMPLETE_NO_DESC_COMMAND,
    DEFAULT_EXECUTABLE_NAME,
    DIRECTIVE_TRAILER_PREFIX,
)

# -----------------------------------------------------------------------------
# TEMPLATES
# -----------------------------------------------------------------------------

_BASH_TEMPLATE = """\
# bash completion for {name}

__{func}_complete() {{
    local cur out line directive=0
    local -a candidates=()
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    out=$({cmd} {no_desc} "${{COMP_WORDS[@]:1:COMP_CWORD-1}}" "$cur" 2>/dev/null) || return 0

    while IFS='' read -r line; do
        case "$line" in
            :[0-9]*) directive=${{line#:}} ;;
            "{trailer}"*|"") ;;
            *) candidates+=("$line") ;;
        esac
    done <<< "$out"

    (( directive & 1 )) && return 0
    (( directive & 2 )) && compopt -o nospace 2>/dev/null

    COMPREPLY=()
    while IFS='' read -r line; do
        [[ -n "$line" ]] && COMPREPLY+=("$line")
    done < <(compgen -W "${{candidates[*]}}" -- "$cur")

    if (( ! (directive & 4) )) && (( ${{#COMPREPLY[@]}} == 0 )); then
        compopt -o default 2>/dev/null
    fi
    return 0
}}

complete -F __{func}_complete {cmd}
"""

_ZSH_TEMPLATE = """\
#compdef {name}

_{func}() {{
    local -a lines candidates
    local line directive=0
    lines=("${{(@f)$({cmd} {complete} "${{(@)words[2,CURRENT-1]}}" "${{words[CURRENT]}}" 2>/dev/null)}}")

    for line in "${{lines[@]}}"; do
        case "$line" in
            :[0-9]*) directive=${{line#:}} ;;
            "{trailer}"*|"") ;;
            *) candidates+=("${{${{line%%$'\\t'*}}//:/\\\\:}}:${{line#*$'\\t'}}") ;;
        esac
    done

    (( directive & 1 )) && return 1
    if (( directive & 2 )); then
        _describe -t commands {quoted_name} candidates -S ''
    else
        _describe -t commands {quoted_name} candidates
    fi
}}

if [ "$funcstack[1]" = "_{func}" ]; then
    _{func} "$@"
else
    compdef _{func} {cmd}
fi
"""

_FISH_TEMPLATE = """\
# fish completion for {name}

function __{func}_complete
    set -l args (commandline -opc)
    set -e args[1]
    {cmd} {complete} $args (commandline -ct) 2>/dev/null | string match -v -r '^(:[0-9]+|{trailer}.*)$'
end

complete -c {cmd} -f -a '(__{func}_complete)'
"""

_ALIAS_TEMPLATE = """\
#!/usr/bin/env sh
# Runs the scripts under {root} as '{name}'.
exec {program} --root {quoted_root} --executable {quoted_name} "$@"
"""

_TEMPLATES: Dict[str, str] = {
    "bash": _BASH_TEMPLATE,
    "zsh": _ZSH_TEMPLATE,
    "fish": _FISH_TEMPLATE,
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_completion_script(shell: str, executable_name: str) -> str:
    """
    Render the completion script for a shell.

    Args:
        shell: One of 'bash', 'zsh' or 'fish'.
        executable_name: Name the completions are registered under.

    Returns:
        str: Script text to be sourced by the shell.

    Raises:
        ValueError: For an unsupported shell.
    """
    template = _TEMPLATES.get(shell)
    if template is None:
        raise ValueError(f"Unsupported shell: {shell}")

    return template.format(
        name=executable_name,
        func=_function_name(executable_name),
        cmd=shlex.quote(executable_name),
        quoted_name=shlex.quote(executable_name),
        complete=COMPLETE_COMMAND,
        no_desc=COMPLETE_NO_DESC_COMMAND,
        trailer=DIRECTIVE_TRAILER_PREFIX.strip(),
    )


def render_alias_script(executable_name: str, root: str, program: str = DEFAULT_EXECUTABLE_NAME) -> str:
    """
    Render the wrapper that runs the dispatcher under another name.

    Args:
        executable_name: Name the wrapper reports to scripts.
        root: Absolute root of the script tree.
        program: Dispatcher binary the wrapper execs.

    Returns:
        str: POSIX shell wrapper script.
    """
    return _ALIAS_TEMPLATE.format(
        root=root,
        name=executable_name,
        program=shlex.quote(program),
        quoted_root=shlex.quote(root),
        quoted_name=shlex.quote(executable_name),
    )


def _function_name(executable_name: str) -> str:
    return env_prefix_for(executable_name).lower() or "tome"


SCRIPT_RENDERERS: Dict[str, Callable[[str], str]] = {
    shell: (lambda name, _shell=shell: render_completion_script(_shell, name)) for shell in _TEMPLATES
}
