from src.site_attendance.site_attendance.database.bootstrap import SCHEMA_PATH, iter_sql_statements


def test_splits_on_semicolons_outside_quotes():
    sql = """
    -- header comment; ignored
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1), ('x;y');
    INSERT INTO a VALUES ('it\\'s; fine')
    """

    statements = list(iter_sql_statements(sql))

    assert statements == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES (1), ('x;y')",
        "INSERT INTO a VALUES ('it\\'s; fine')",
    ]


def test_schema_file_ships_with_the_repo():
    statements = list(iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))
    tables = [s for s in statements if s.upper().startswith("CREATE TABLE")]

    assert SCHEMA_PATH.name == "schema.sql"
    assert any("attendance_sessions" in s for s in tables)
    assert any("sync_action_log" in s for s in tables)


def _table(name):
    statements = iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
    return next(s for s in statements if f"CREATE TABLE IF NOT EXISTS {name} (" in s)


def test_event_timestamps_keep_microseconds():
    expected = {
        "attendance_sessions": ("check_in_time", "check_out_time"),
        "attendance_records": ("last_event_at", "checked_out_at"),
        "project_breaks": ("started_at", "ended_at"),
        "organization_blacklist": ("created_at",),
        "wages": ("updated_at",),
        "sync_action_log": ("processed_at",),
    }
    for table, columns in expected.items():
        ddl = _table(table)
        for column in columns:
            assert f"{column} DATETIME(6)" in ddl, f"{table}.{column}"


def test_worked_minutes_are_stored_to_the_hundredth():
    assert "worked_minutes DECIMAL(10, 2)" in _table("attendance_sessions")
    assert "worked_minutes DECIMAL(10, 2)" in _table("attendance_records")


def test_supervision_tables_exist():
    assert "approved_by INT NULL" in _table("attendance_records")
    assert "PRIMARY KEY (org_id, manager_id)" in _table("organization_managers")
    assert "PRIMARY KEY (project_id, engineer_id)" in _table("project_site_engineers")
