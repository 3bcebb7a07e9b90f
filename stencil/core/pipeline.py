"""End-to-end template processing: resolve, scan, plan, apply."""
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from stencil.core.config import StencilConfig
from stencil.core.executor import Executor, ProgressCallback
from stencil.core.logger import get_logger
from stencil.core.planner import plan
from stencil.core.scanner import TreeScanner
from stencil.models.actions import Action
from stencil.models.paths import ChildPath
from stencil.services.git.retriever import TemplateRetriever

module_logger = get_logger(__name__)

VCS_METADATA_DIRS = {".git"}

ConfirmCallback = Callable[[List[Action]], bool]


@dataclass
class RunContext:
    """What to materialize and where."""
    dst_folder: Path
    src_uri: str
    revision: Optional[str] = None
    logger: logging.Logger = field(default=module_logger)


def cache_path_for(src_uri: str, config: StencilConfig) -> Path:
    """Folder holding the working copy of a remote template."""
    digest = hashlib.md5(src_uri.encode("utf-8")).hexdigest()
    return config.cache_dir / "git" / digest


def resolve_template(
    ctx: RunContext,
    config: StencilConfig,
    retriever: Optional[TemplateRetriever] = None,
) -> Path:
    """Return a local folder holding the template.

    Existing local folders are used in place. Anything else is treated as a
    git URL and retrieved into the template cache.
    """
    local = Path(ctx.src_uri).expanduser()
    if local.is_dir():
        ctx.logger.debug(f"Using local template folder {local}")
        return local

    retriever = retriever or TemplateRetriever(
        signature=config.signature,
        remote_name=config.remote_name,
        logger=ctx.logger,
    )
    destination = cache_path_for(ctx.src_uri, config)
    retriever.retrieve(destination, ctx.src_uri, ctx.revision or config.default_revision)
    return destination


def collect_sources(template_root: Path) -> List[ChildPath]:
    """Scan the template, leaving out version control metadata."""
    return [
        entry for entry in TreeScanner(template_root)
        if not (entry.relative.parts and entry.relative.parts[0] in VCS_METADATA_DIRS)
    ]


def build_plan(
    ctx: RunContext,
    config: StencilConfig,
    retriever: Optional[TemplateRetriever] = None,
) -> Tuple[Path, List[Action]]:
    """Resolve the template and plan its materialization into ``ctx.dst_folder``."""
    template_root = resolve_template(ctx, config, retriever)
    sources = collect_sources(template_root)
    ctx.logger.debug(f"Found {len(sources)} template entries in {template_root}")
    return template_root, plan(ctx.dst_folder, sources)


def process(
    ctx: RunContext,
    config: StencilConfig,
    confirm: Optional[ConfirmCallback] = None,
    on_progress: Optional[ProgressCallback] = None,
    retriever: Optional[TemplateRetriever] = None,
) -> List[Action]:
    """Materialize or update ``ctx.dst_folder`` from the template.

    Args:
        ctx: Source, destination and revision
        config: Runtime configuration
        confirm: Called with the plan; returning False cancels without changes
        on_progress: Called once per applied action
        retriever: Template retriever (built from config when omitted)

    Returns:
        The applied actions, or an empty list when cancelled
    """
    _template_root, actions = build_plan(ctx, config, retriever)

    if confirm is not None and not confirm(actions):
        ctx.logger.info("Apply cancelled")
        return []

    return Executor(on_progress=on_progress, logger=ctx.logger).execute(actions)
