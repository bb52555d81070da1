"""
geometry.py
-----------
World country polygons for the choropleth join.

Natural Earth admin-0 countries at 1:110m are downloaded once (with
retries) and cached locally; an existing file is reused as is.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import geopandas as gpd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Config, Paths

logger = logging.getLogger(__name__)


def make_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=1.0,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


def download_world_geometry(session: requests.Session, cfg: Config, out_path: str) -> str:
    r = session.get(cfg.world_url, timeout=(cfg.timeout_connect, cfg.timeout_read))
    r.raise_for_status()

    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(r.content)

    logger.info(f"Saved: {out_path} | bytes: {len(r.content)}")
    return out_path


def load_world_geometry(paths: Paths, cfg: Config, session: Optional[requests.Session] = None) -> gpd.GeoDataFrame:
    if not os.path.exists(paths.world_geometry):
        download_world_geometry(session or make_session(), cfg, paths.world_geometry)

    world = gpd.read_file(paths.world_geometry)
    if cfg.world_name_column not in world.columns:
        raise ValueError(
            f"World geometry has no '{cfg.world_name_column}' column "
            f"(available: {sorted(world.columns)})"
        )

    logger.info(f"Loaded: {paths.world_geometry} | countries: {len(world)}")
    return world
