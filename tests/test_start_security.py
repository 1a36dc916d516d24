"""Unit tests for the entry script."""

import unittest
import json
import logging
import tempfile
import shutil
import os
import sys
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import start_security
from cat_security_system.logging_config import LOGGER_PREFIX


class TestStartSecurity(unittest.TestCase):
    """Test cases for main()."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.test_dir, "config.json")

    def tearDown(self):
        logger = logging.getLogger(LOGGER_PREFIX)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def write_config(self, values):
        with open(self.config_path, 'w') as f:
            json.dump(values, f)

    def test_wrong_typed_config_exits_with_error(self):
        self.write_config({"confidence_threshold": "50"})
        with patch.object(start_security, 'create_service') as create_service:
            self.assertEqual(start_security.main(["--config", self.config_path]), 1)
        create_service.assert_not_called()

    def test_wrong_typed_log_level_exits_with_error(self):
        self.write_config({"log_level": 10})
        self.assertEqual(start_security.main(["--config", self.config_path]), 1)

    def test_service_failure_exits_with_error(self):
        self.write_config({"image_service": "fake", "log_dir": "",
                           "database_path": os.path.join(self.test_dir, "security.db")})
        with patch.object(start_security, 'create_service', side_effect=RuntimeError("no model")):
            self.assertEqual(start_security.main(["--config", self.config_path]), 1)


if __name__ == '__main__':
    unittest.main()
