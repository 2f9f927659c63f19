from tests.fixtures.upload_fixtures import data_dir, incoming_dir, make_upload  # noqa: F401
