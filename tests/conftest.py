"""Pytest configuration and fixtures."""

import pytest
import numpy as np


@pytest.fixture
def nc_path(tmp_path):
    """Path for a fresh NetCDF file."""
    return tmp_path / "test.nc"


@pytest.fixture
def writable_file(nc_path):
    """Newly created, writable file, closed after the test."""
    import safenc

    f = safenc.create(nc_path)
    yield f
    f.close()


@pytest.fixture
def sample_file(nc_path):
    """Path of a closed file with groups, dimensions, variables and attributes.

    Layout::

        /            dims x=3, t=unlimited; vars v(x) int32, temp(t) double
        /obs         dims y=2; var grid(x, y) float32
        /obs/station var count(t) int64
        /model
    """
    import safenc

    with safenc.create(nc_path) as f:
        f.put_attribute("title", "sample")
        f.create_dimension("x", 3)
        f.create_unlimited_dimension("t")

        v = f.create_variable("v", safenc.NcType.INT, ["x"])
        v.put_values(np.array([1, 2, 3], dtype=np.int32))
        v.put_attribute("units", "m")

        temp = f.create_variable("temp", safenc.NcType.DOUBLE, ["t"])
        temp.put_values(np.array([10.0, 20.0]))

        obs = f.create_group("obs")
        obs.create_dimension("y", 2)
        grid = obs.create_variable("grid", safenc.NcType.FLOAT, ["x", "y"])
        grid.put_values(np.arange(6, dtype=np.float32).reshape(3, 2))

        station = obs.create_group("station")
        count = station.create_variable("count", safenc.NcType.INT64, ["t"])
        count.put_values(np.array([5, 6], dtype=np.int64))

        f.create_group("model")
    return nc_path
