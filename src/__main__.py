#!/usr/bin/env python3
"""
lexalias - Grammar aliases for static site builds

Builds a directory of markdown pages into HTML, highlighting fenced code
blocks with Pygments. Right before pages are rendered, the PureScript
aliases plugin registers extra grammars: by default ```ps fences are
highlighted with TypeScript's grammar under the title "Purescript".

Extra aliases can be declared in the site's _config.yml:

    grammar_aliases:
      - base: typescript
        title: Purescript
        aliases: [ps, psc]
    collision: error          # or: overwrite
    pygments_style: monokai

Usage:
    lexalias inputdir/ outputdir/

Examples:
    # Basic build
    lexalias site/ _site/

    # Different highlighting style, list registered aliases
    lexalias site/ _site/ --style friendly --listAliases

    # Verbose output
    lexalias site/ _site/ -vv
"""

import sys
import traceback
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .lib import Site, SiteError, GrammarError, HookRegistry, hooks_register, __version__, LOG, state_connectToLogger
from .config import appsettings
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
  _                 _ _
 | | _____  ____ _ | (_) __ _ ___
 | |/ _ \ \/ / _` || | |/ _` / __|
 | |  __/>  < (_| || | | (_| \__ \
 |_|\___/_/\_\__,_||_|_|\__,_|___/

  Grammar aliases for static site builds
"""

# Define CLI arguments
parser = ArgumentParser(
    description="lexalias - build markdown pages with aliased syntax-highlighting grammars",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument("inputdir", type=str, help="Site source directory")

parser.add_argument("outputdir", type=str, help="Directory rendered pages are written to")

parser.add_argument(
    "--config",
    default=None,
    type=str,
    help="Site config file. Defaults to _config.yml in inputdir",
)

parser.add_argument(
    "--style",
    default=None,
    type=str,
    help="Pygments style for highlight.css (overrides the site config)",
)

parser.add_argument(
    "--listAliases",
    action="store_true",
    help="List the grammar aliases registered during the build",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the site source directory and resolve the config file.

    Returns:
        ProgramState with added fields:
            - configFile: Resolved config path, None if there is none
            - envOK: True if environment is valid

    Exits:
        1 if the source directory or an explicit --config file is missing
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Site source not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.config:
        state.configFile = Path(state.config)
        if not state.configFile.exists():
            print(f"Error: Config file not found: {state.configFile}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        LOG(f"Config file: {state.configFile}", level=2)

    LOG(f"Source: {state.inputdir}", level=2)
    LOG(f"Destination: {state.outputdir}", level=2)

    state.envOK = True
    return state


def site_build(inputstate: ProgramState) -> ProgramState:
    """
    Build the site with the PureScript aliases plugin attached.

    Returns:
        ProgramState with added fields:
            - site: The processed Site
            - buildResult: Dict from Site.process()

    Exits:
        1 if the site config is invalid or a grammar registration fails
    """

    state = inputstate.copy()

    LOG("Building site...", level=1)

    hooks = HookRegistry()
    hooks_register(hooks)

    try:
        state.site = Site(
            source=state.inputdir,
            destination=state.outputdir,
            hooks=hooks,
            config_path=state.configFile,
            style=state.style,
        )
        state.buildResult = state.site.process()
    except (SiteError, GrammarError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            traceback.print_exc()
        sys.exit(1)

    LOG(f"Rendered {state.buildResult['page_count']} page(s)", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Summarise the build for the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if buildResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.buildResult:
        print("Error: Build failed", file=sys.stderr)
        sys.exit(1)

    LOG("✓ Build successful!", level=1)
    LOG(f"  Pages: {state.buildResult['page_count']}", level=1)
    LOG(f"  Output: {state.outputdir}", level=1)

    if state.listAliases:
        print("Registered grammar aliases:")
        for alias, title in state.buildResult['aliases'].items():
            print(f"  {alias:<12} {title}")
    return state


def main(argv: Optional[List[str]] = None) -> ProgramState:
    """
    Main entry point - build a site from inputdir into outputdir.

    Orchestrates the build pipeline:
        1. env_check: Validate the source directory and config path
        2. site_build: Process the site with the aliases plugin attached
        3. results_report: Display results to user
    """
    options: Namespace = parser.parse_args(argv)

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=Path(options.inputdir), outputdir=Path(options.outputdir)
    )
    if appsettings.debug_mode:
        state.verbosity = max(state.verbosity, 3)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    return pipeline(state, env_check, site_build, results_report)


if __name__ == "__main__":
    main()
