"""Configuration utilities.

Scene clustering is configured with Hydra. The YAML files live in the `scene_clustering.configs` module; the
top-level `scene_clustering.yaml` instantiates a `SceneClustering` with its options and partitioner.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

import hydra
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

import scene_clustering.utils.logger as logger_utils
from scene_clustering.common.exceptions import ConfigurationError
from scene_clustering.scene_clustering import SceneClustering

logger = logger_utils.get_logger()

CONFIG_MODULE = "scene_clustering.configs"
DEFAULT_CONFIG_NAME = "scene_clustering"


def _log_divider(logger) -> None:
    """Log a visual divider for better readability."""
    logger.info("=" * 80)


def _extract_algorithm_name(target_path: str) -> str:
    """Extract a readable algorithm name from a target path."""
    if not target_path:
        return "Unknown"
    class_name = target_path.split(".")[-1].replace("Partitioner", "")
    # Insert a space before every capital letter except the first.
    return re.sub(r"(?<!^)(?=[A-Z])", " ", class_name).strip()


def log_configuration_summary(cfg: DictConfig, logger) -> None:
    """Log a concise configuration summary."""
    _log_divider(logger)
    logger.info("SCENE CLUSTERING CONFIGURATION SUMMARY")
    _log_divider(logger)

    partitioner_target = OmegaConf.select(cfg, "partitioner._target_", default="")
    logger.info("Graph partitioner: %s", _extract_algorithm_name(partitioner_target))
    for key in ("branching", "image_overlap", "leaf_max_num_images"):
        logger.info("   • %s: %s", key, OmegaConf.select(cfg, f"options.{key}"))
    logger.debug("Full configuration:\n%s", OmegaConf.to_yaml(cfg))


def compose_config(config_name: str = DEFAULT_CONFIG_NAME, overrides: Optional[Sequence[str]] = None) -> DictConfig:
    """Compose a configuration from the packaged Hydra config module.

    Args:
        config_name: name of the top-level YAML file (without extension).
        overrides: Hydra override strings, e.g. ["partitioner=sequential", "options.branching=3"].
    """
    with hydra.initialize_config_module(config_module=CONFIG_MODULE, version_base=None):
        return hydra.compose(config_name=config_name, overrides=list(overrides or []))


def instantiate_scene_clustering(
    config_name: str = DEFAULT_CONFIG_NAME, overrides: Optional[Sequence[str]] = None
) -> SceneClustering:
    """Compose the configuration, log a summary and instantiate the `SceneClustering` it describes."""
    cfg = compose_config(config_name, overrides)
    log_configuration_summary(cfg, logger)
    scene_clustering = instantiate(cfg)
    if not isinstance(scene_clustering, SceneClustering):
        raise ConfigurationError(
            f"Config '{config_name}' instantiates {type(scene_clustering).__name__}, not SceneClustering."
        )
    return scene_clustering
