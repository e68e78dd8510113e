# matrix_oracle/oracle_version.py
# Oracle version constants. Single authoritative definition.
# Referenced by fixture_store.py, report_writer.py and the verdict models
# for version stamping.
# A change to the stored fixture layout requires a STORAGE_FORMAT_VERSION bump.

ORACLE_VERSION: str = "1.0.0"

# Storage format version for persisted fixtures.
STORAGE_FORMAT_VERSION: str = "1.0.0"
