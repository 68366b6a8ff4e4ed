# tests/conftest.py
import os
import tempfile

# Keep test runs away from the user's log file and broker
_log_dir = tempfile.mkdtemp(prefix="pycoolmaster-tests-")
os.environ["LOG_FILE_PATH"] = os.path.join(_log_dir, "pycoolmaster.log")
os.environ["MQTT_ENABLED"] = "false"
os.environ["MQTT_TOPIC_PREFIX"] = "hvac/coolmaster"
os.environ["COOLMASTER_UID"] = "L1.100"
os.environ["COOLMASTER_HOST"] = "coolmaster"
os.environ["COOLMASTER_PORT"] = "10102"
