"""Top-level entry point assembling a ready-to-use Tracer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jaegerlite.config import JaegerliteConfig, load_config
from jaegerlite.exporter.encoder import BatchEncoder
from jaegerlite.exporter.udp_exporter import UdpExporter
from jaegerlite.processors.collector import Collector
from jaegerlite.processors.sampler import Sampler
from jaegerlite.tracer.tracer import Tracer

logger = logging.getLogger(__name__)


def build(
    service_name: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    flush_interval: Optional[float] = None,
    sampler: Optional[Union[Sampler, Dict[str, Any]]] = None,
    encoder: Optional[BatchEncoder] = None,
    config_file: Optional[Union[str, Path]] = None,
    process_tags: Optional[Dict[str, Any]] = None,
) -> Tracer:
    """
    Build a tracer whose exporter is already running.

    Explicit arguments win over ``JAEGERLITE_*`` environment variables, which
    win over the config file.

    Args:
        service_name: Service name reported to the agent (required somewhere)
        host: Agent host, default 127.0.0.1
        port: Agent UDP port, default 6831
        flush_interval: Seconds between flushes, default 10
        sampler: Sampler instance or ``{"type": ..., "param": ...}``
        encoder: Batch encoder, defaults to JSON
        config_file: TOML config file to read
        process_tags: Extra process-level tags

    Raises:
        ConfigurationError: Invalid configuration or sampler
    """
    overrides: Dict[str, Any] = {
        "service_name": service_name,
        "host": host,
        "port": port,
        "flush_interval": flush_interval,
    }
    if isinstance(sampler, dict):
        overrides["sampler"] = dict(sampler)

    config = load_config(config_file=config_file, overrides=overrides)
    sampler_instance = sampler if isinstance(sampler, Sampler) else None
    return build_from_config(config, sampler=sampler_instance, encoder=encoder, process_tags=process_tags)


def build_from_config(
    config: JaegerliteConfig,
    sampler: Optional[Sampler] = None,
    encoder: Optional[BatchEncoder] = None,
    process_tags: Optional[Dict[str, Any]] = None,
) -> Tracer:
    """Build a tracer from an already validated configuration."""
    if config.logging.debug:
        logging.getLogger("jaegerlite").setLevel(logging.DEBUG)

    # Sampler first: a bad sampler must fail before any socket or thread exists.
    if sampler is None:
        sampler = Sampler.build(config.sampler.type, config.sampler.param)

    collector = Collector()
    exporter = UdpExporter(
        service_name=config.tracer.service_name,
        collector=collector,
        host=config.agent.host,
        port=config.agent.port,
        flush_interval=config.agent.flush_interval,
        encoder=encoder,
        max_packet_size=config.agent.max_packet_size,
        process_tags=process_tags,
    )
    exporter.start()
    logger.debug(
        f"Tracer for '{config.tracer.service_name}' reporting to "
        f"{config.agent.host}:{config.agent.port} with {sampler!r}"
    )
    return Tracer(collector, exporter, sampler)
