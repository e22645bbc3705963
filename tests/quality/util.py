# Copyright 2017 Christoph Reiter
#           2026 mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

import configparser
import os
from collections import namedtuple

import mpegtag


SetupConfig = namedtuple("SetupConfig", ["ignore", "builtins", "exclude"])


def _split(value):
    return [v.strip() for v in str(value).split(",") if v.strip()]


def parse_setup_cfg():
    """Parses the flake8 config from the setup.cfg file in the root dir

    Returns:
        SetupConfig
    """

    base_dir = os.path.dirname(
        os.path.dirname(os.path.abspath(mpegtag.__file__)))

    cfg = os.path.join(base_dir, "setup.cfg")
    config = configparser.RawConfigParser()
    config.read(cfg)

    ignore = _split(config.get("flake8", "ignore"))
    builtins = _split(config.get("flake8", "builtins"))
    exclude = [
        os.path.join(base_dir, e.replace("/", os.sep))
        for e in _split(config.get("flake8", "exclude"))]

    return SetupConfig(ignore, builtins, exclude)


setup_cfg = parse_setup_cfg()
