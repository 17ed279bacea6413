"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the build pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the build progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, config, style, listAliases
        - env_check: configFile, envOK
        - site_build: site, buildResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Site source directory (markdown pages, _config.yml)
        outputdir: Destination directory for rendered pages
        verbosity: Logging verbosity level (1-3)
        config: Optional site config path (defaults to inputdir/_config.yml)
        style: Optional Pygments style overriding settings and _config.yml
        listAliases: Report registered grammar aliases after the build
        envOK: Environment validation passed
        configFile: Resolved site config path, None when absent
        site: The Site build context after processing
        buildResult: Build results (status, page_count, written, aliases)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    config: Optional[str] = field(default=None)
    style: Optional[str] = field(default=None)
    listAliases: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    configFile: Optional[Path] = field(default=None)
    site: Optional[Any] = field(default=None)  # Site at runtime
    buildResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Options that are not ProgramState fields are dropped.
        """
        options_dict = vars(options)
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        # Explicit directories override anything carried in the namespace
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(initial_state, env_check, site_build, results_report)

    This is equivalent to:
        results_report(site_build(env_check(initial_state)))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
