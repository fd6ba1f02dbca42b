"""
Tests for deanon.config.

Tests verify:
1. CLUSTER_DB_PATH path resolution and env override
2. get_connection() returns a DuckDB connection
3. ClusteringConfig env overrides and validation
4. Logging setup
"""

import importlib
import logging
import os
from pathlib import Path
from unittest.mock import patch

import duckdb
import pytest


class TestClusterDBPath:
    """Tests for CLUSTER_DB_PATH configuration."""

    def test_default_path(self):
        """Default path should be data/clusters.duckdb."""
        with patch.dict(os.environ, {}, clear=True), patch("dotenv.load_dotenv"):
            import deanon.config.database as db_module

            importlib.reload(db_module)

            assert db_module.CLUSTER_DB_PATH == Path("data/clusters.duckdb")

    def test_env_var_overrides_default(self, tmp_path):
        custom_path = str(tmp_path / "custom.duckdb")

        with patch.dict(os.environ, {"CLUSTER_DB_PATH": custom_path}):
            import deanon.config.database as db_module

            importlib.reload(db_module)

            assert db_module.CLUSTER_DB_PATH == Path(custom_path)

        importlib.reload(db_module)


class TestGetConnection:
    """Tests for get_connection() helper."""

    def test_returns_duckdb_connection(self, tmp_path):
        from deanon.config import get_connection

        conn = get_connection(db_path=str(tmp_path / "test.duckdb"))
        assert isinstance(conn, duckdb.DuckDBPyConnection)
        conn.close()

    def test_creates_parent_directory(self, tmp_path):
        from deanon.config import get_connection

        db_path = tmp_path / "nested" / "clusters.duckdb"
        conn = get_connection(db_path=str(db_path))
        conn.execute("CREATE TABLE marker (id INTEGER)")
        conn.close()

        assert db_path.exists()

    def test_read_only_mode(self, tmp_path):
        from deanon.config import get_connection

        db_path = tmp_path / "test_ro.duckdb"
        conn = duckdb.connect(str(db_path))
        conn.execute("CREATE TABLE test (id INTEGER)")
        conn.close()

        conn = get_connection(read_only=True, db_path=str(db_path))
        conn.execute("SELECT * FROM test")
        with pytest.raises(duckdb.Error):
            conn.execute("INSERT INTO test VALUES (1)")
        conn.close()


class TestClusteringConfig:
    """Tests for ClusteringConfig."""

    def test_defaults(self):
        from deanon.config import ClusteringConfig

        with patch.dict(os.environ, {}, clear=True):
            config = ClusteringConfig()

        assert config.transactions_path == "transactions.txt"
        assert config.user_map_path == Path("data/clusters/userMap.txt")
        assert config.key_map_path == Path("data/clusters/keyMap.txt")
        assert config.graph_path == Path("data/clusters/userGraph.txt")
        assert config.save_to_db is False
        assert config.skip_unresolved is False
        assert config.log_level == "INFO"
        assert config.log_dir is None

    def test_env_overrides(self):
        from deanon.config import ClusteringConfig

        env = {
            "TRANSACTIONS_PATH": "in.txt",
            "CLUSTER_OUTPUT_DIR": "out",
            "GRAPH_FILENAME": "g.csv",
            "SAVE_CLUSTERS_DB": "TRUE",
            "SKIP_UNRESOLVED": "true",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ClusteringConfig()

        assert config.transactions_path == "in.txt"
        assert config.graph_path == Path("out/g.csv")
        assert config.save_to_db is True
        assert config.skip_unresolved is True
        assert config.log_level == "DEBUG"

    def test_invalid_log_level(self):
        from deanon.config import ClusteringConfig

        with pytest.raises(ValueError, match="log_level"):
            ClusteringConfig(log_level="LOUD")

    def test_invalid_log_mode(self):
        from deanon.config import ClusteringConfig

        with pytest.raises(ValueError, match="log_mode"):
            ClusteringConfig(log_mode="verbose")

    def test_to_dict(self):
        from deanon.config import ClusteringConfig

        config = ClusteringConfig(transactions_path="x.txt")

        assert config.to_dict()["transactions_path"] == "x.txt"

    def test_reload_config(self):
        from deanon.config import get_config, reload_config

        with patch.dict(os.environ, {"TRANSACTIONS_PATH": "reloaded.txt"}):
            config = reload_config()
            assert config.transactions_path == "reloaded.txt"
            assert get_config() is config

        reload_config()


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging_console_only(self):
        from deanon.config import setup_logging

        logger = setup_logging(name="deanon_test_console", level="WARNING")

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        from deanon.config import setup_logging

        logger = setup_logging(
            name="deanon_test_file", mode="production", log_dir=str(tmp_path)
        )
        logger.info("written")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert '"message": "written"' in (tmp_path / "deanon_test_file.log").read_text()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_module_loggers_propagate_to_package_logger(self, tmp_path):
        import deanon.config.logging_config as logging_config
        from deanon import run_clustering

        logger = logging_config.setup_logging(log_dir=str(tmp_path))
        run_clustering.logger.warning("from runner")
        for handler in logger.handlers:
            handler.flush()

        assert not hasattr(logging_config, "get_logger")
        assert "deanon.run_clustering" in (tmp_path / "deanon.log").read_text()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
