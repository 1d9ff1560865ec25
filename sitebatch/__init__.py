"""Batch site generator -- many game sites from one template project.

Copies a template site once per planned domain, gives every copy its own
``site`` configuration block and a random subset of the template's html5
games, then publishes each copy as a private GitHub repository.

Quick usage::

    from sitebatch import BatchPipeline, Config, GenerationSettings

    config = Config(workspace_root="..", domains=["example.com"], account="me")
    settings = GenerationSettings(template_name="site31", starting_name="site47")
    result = await BatchPipeline(config, settings).run()
"""

from sitebatch.catalog import CatalogPartitioner
from sitebatch.config import Config, GenerationSettings, SiteTemplateConfig
from sitebatch.domains import DomainPlanner
from sitebatch.materializer import ProjectMaterializer, SiteProject
from sitebatch.naming import NameAllocator
from sitebatch.pipeline import BatchPipeline, BatchResult
from sitebatch.publisher import PublishCoordinator
from sitebatch.template import TemplateLocator

__version__ = "0.1.0"

__all__ = [
    "BatchPipeline",
    "BatchResult",
    "CatalogPartitioner",
    "Config",
    "DomainPlanner",
    "GenerationSettings",
    "NameAllocator",
    "ProjectMaterializer",
    "PublishCoordinator",
    "SiteProject",
    "SiteTemplateConfig",
    "TemplateLocator",
]
