"""Row-level security DDL shared by the Alembic migration and the test schema.

Every tenant-scoped table gets one policy, ``<table>_tenant_isolation``,
comparing its ``tenant_id`` column with the transaction-local
``app.current_tenant_id`` parameter. An unset or empty parameter matches
nothing. Administrative principals (superusers, table owners) bypass these
policies, which is why the application always runs as the restricted role.
"""

TENANT_SETTING = "app.current_tenant_id"

TENANT_SCOPED_TABLES = ("tenants", "tenant_features", "users")

# Tenant-agnostic infrastructure tables the restricted role may use directly
SHARED_TABLES = ("outbox_events",)

_POLICY_PREDICATE = f"""
CASE
    WHEN coalesce(current_setting('{TENANT_SETTING}', true), '') = '' THEN false
    ELSE tenant_id = current_setting('{TENANT_SETTING}', true)::uuid
END
"""


def create_role_sql(role: str) -> list[str]:
    return [
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = '{role}') THEN
                CREATE ROLE {role} NOLOGIN;
            END IF;
        END
        $$
        """,
        # The login role must be a member to SET ROLE into it
        f"GRANT {role} TO CURRENT_USER",
        f"GRANT USAGE ON SCHEMA public TO {role}",
    ]


def enable_isolation_sql(table: str, role: str) -> list[str]:
    return [
        f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY",
        f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table}",
        f"""
        CREATE POLICY {table}_tenant_isolation ON {table}
            FOR ALL
            TO {role}
            USING ({_POLICY_PREDICATE})
            WITH CHECK ({_POLICY_PREDICATE})
        """,
        f"GRANT SELECT, INSERT, UPDATE, DELETE ON TABLE {table} TO {role}",
    ]


def disable_isolation_sql(table: str, role: str) -> list[str]:
    return [
        f"REVOKE ALL ON TABLE {table} FROM {role}",
        f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table}",
        f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY",
    ]


def grant_shared_sql(table: str, role: str) -> list[str]:
    return [f"GRANT SELECT, INSERT, UPDATE ON TABLE {table} TO {role}"]


def create_resolver_function_sql(role: str) -> list[str]:
    """Tenant-agnostic handle lookup exposed as a SECURITY DEFINER function.

    The function runs with its owner's privileges and returns only the
    internal id, so the restricted role never needs read access to other
    tenants' rows to resolve an inbound request.
    """
    return [
        """
        CREATE OR REPLACE FUNCTION resolve_tenant_id(handle text)
        RETURNS uuid
        LANGUAGE sql
        STABLE
        SECURITY DEFINER
        SET search_path = public
        AS $$
            SELECT id FROM tenants WHERE external_org_id = handle LIMIT 1
        $$
        """,
        "REVOKE ALL ON FUNCTION resolve_tenant_id(text) FROM PUBLIC",
        f"GRANT EXECUTE ON FUNCTION resolve_tenant_id(text) TO {role}",
    ]


def drop_resolver_function_sql() -> list[str]:
    return ["DROP FUNCTION IF EXISTS resolve_tenant_id(text)"]


def install_sql(role: str) -> list[str]:
    """Everything needed on top of the plain tables, in execution order."""
    statements = create_role_sql(role)
    for table in TENANT_SCOPED_TABLES:
        statements += enable_isolation_sql(table, role)
    for table in SHARED_TABLES:
        statements += grant_shared_sql(table, role)
    statements += create_resolver_function_sql(role)
    return statements


def uninstall_sql(role: str) -> list[str]:
    statements = drop_resolver_function_sql()
    for table in SHARED_TABLES:
        statements.append(f"REVOKE ALL ON TABLE {table} FROM {role}")
    for table in reversed(TENANT_SCOPED_TABLES):
        statements += disable_isolation_sql(table, role)
    return statements
