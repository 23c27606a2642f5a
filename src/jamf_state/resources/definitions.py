"""Field tables for every supported Jamf resource kind.

Adding a kind means adding a ``ResourceKind`` here and registering it in
``KINDS``; the reader, diff engine and writer need no changes.
"""
from typing import Optional

from ..errors import ParseError
from .catalog import read_privileges
from .fields import (
    BoolField,
    IntField,
    MappingField,
    RecordKey,
    RecordListField,
    StringField,
    StringListField,
    scope_list,
)
from .kinds import (
    Coerce,
    Constraint,
    Lookup,
    Mirror,
    ReadAll,
    ResourceKind,
    WireFormat,
)


def _str(name: str, at: tuple = (), wire: Optional[str] = None, **kw) -> StringField:
    return StringField(name=name, path=at + (wire or name,), **kw)


def _bool(name: str, at: tuple = (), wire: Optional[str] = None, **kw) -> BoolField:
    return BoolField(name=name, path=at + (wire or name,), **kw)


def _int(name: str, at: tuple = (), wire: Optional[str] = None, **kw) -> IntField:
    return IntField(name=name, path=at + (wire or name,), **kw)


ACCESS_LEVELS = ("Full Access", "Site Access", "Group Access")
PRIVILEGE_SETS = ("Administrator", "Auditor", "Enrollment Only", "Custom")

_SCOPE_TAGS = {
    "computers": "computer",
    "computer_groups": "computer_group",
    "buildings": "building",
    "departments": "department",
    "users": "user",
    "user_groups": "user_group",
    "network_segments": "network_segment",
    "ibeacons": "ibeacon",
    "jss_users": "jss_user",
    "jss_user_groups": "jss_user_group",
}


def _scope(prefix: str, at: tuple, sections: tuple) -> tuple:
    return tuple(
        scope_list(f"{prefix}_{section}", at + (section,), _SCOPE_TAGS[section])
        for section in sections
    )


def _privileges(default: Optional[list] = None) -> tuple:
    return tuple(
        StringListField(
            name=f"{name}_privileges",
            path=("privileges", section),
            item_tag="privilege",
            default=default,
        )
        for name, section in (
            ("jss_object", "jss_objects"),
            ("jss_settings", "jss_settings"),
            ("jss_actions", "jss_actions"),
            ("casper_admin", "casper_admin"),
        )
    )


# === Accounts ===

ACCOUNT = ResourceKind(
    name="account",
    path="JSSResource/accounts",
    list_key=("accounts", "users"),
    detail_key="account",
    id_segment="userid",
    cloud_name_field="account_name",
    description="Jamf Pro user account",
    fields=(
        _str("full_name"),
        _str("email"),
        _str("email_address"),
        _str("password", sensitive=True, probe=True),
        _str("enabled", choices=("Enabled", "Disabled")),
        _bool("force_password_change", default=False),
        _str("access_level", choices=ACCESS_LEVELS),
        _str("privilege_set", choices=PRIVILEGE_SETS),
    ) + _privileges(),
    mirrors=(Mirror(source="email", target="email_address"),),
)

ACCOUNT_GROUP = ResourceKind(
    name="account_group",
    path="JSSResource/accounts",
    list_key=("accounts", "groups"),
    detail_key="group",
    id_segment="groupid",
    cloud_name_field="group_name",
    description="Jamf Pro account group, optionally bound to an LDAP server",
    fields=(
        StringField(
            name="ldap_server",
            path=("ldap_server", "id"),
            read_path=("ldap_server", "name"),
        ),
        _str("access_level", choices=ACCESS_LEVELS),
        _str("privilege_set", choices=PRIVILEGE_SETS),
        _bool("jss_object_read_all", default=False, compare=False, write=False),
        _bool("jss_setting_read_all", default=False, compare=False, write=False),
    ) + _privileges(),
    read_all=(
        ReadAll("jss_object_read_all", "jss_object_privileges", read_privileges("jss_objects")),
        ReadAll("jss_setting_read_all", "jss_settings_privileges", read_privileges("jss_settings")),
    ),
    lookups=(("ldap_server", Lookup("JSSResource/ldapservers", ("ldap_servers",))),),
)

# === Inventory objects ===

BUILDING = ResourceKind(
    name="building",
    path="api/v1/buildings",
    list_key=("results",),
    detail_key=None,
    id_segment=None,
    wire_format=WireFormat.JSON,
    cloud_name_field="building_name",
    fields=(
        _str("streetaddress1", wire="streetAddress1", default=""),
        _str("streetaddress2", wire="streetAddress2", default=""),
        _str("city", default=""),
        _str("stateprovince", wire="stateProvince", default=""),
        _str("zippostalcode", wire="zipPostalCode", default=""),
        _str("country", default=""),
    ),
)

CATEGORY = ResourceKind(
    name="category",
    path="JSSResource/categories",
    list_key=("categories",),
    detail_key="category",
    cloud_name_field="category_name",
    fields=(
        _int("priority", required=True),
    ),
)

DEPARTMENT = ResourceKind(
    name="department",
    path="JSSResource/departments",
    list_key=("departments",),
    detail_key="department",
    fields=(),
)

NETWORK_SEGMENT = ResourceKind(
    name="network_segment",
    path="JSSResource/networksegments",
    list_key=("network_segments",),
    detail_key="network_segment",
    cloud_name_field="segment_name",
    fields=(
        _str("starting_address", required=True),
        _str("ending_address", required=True),
        _str("distribution_point", default=""),
        _str("building", default=""),
        _str("department", default=""),
        _bool("override_buildings", default=False),
        _bool("override_departments", default=False),
    ),
)

# === Software ===

SCRIPT = ResourceKind(
    name="script",
    path="JSSResource/scripts",
    list_key=("scripts",),
    detail_key="script",
    cloud_name_field="script_name",
    fields=(
        _str("category", default="None"),
        _str("info", default=""),
        _str("notes", default=""),
        _str("priority", default="After", choices=("After", "Before", "At Reboot")),
    ) + tuple(
        _str(f"parameter{n}", at=("parameters",), default="", empty_is_absent=True)
        for n in range(4, 12)
    ) + (
        _str("os_requirements", default=""),
        _str("script", wire="script_contents", xml_document=False),
    ),
)

PACKAGE = ResourceKind(
    name="package",
    path="JSSResource/packages",
    list_key=("packages",),
    detail_key="package",
    cloud_name_field="package_name",
    fields=(
        _str("category"),
        _str("filename", default_from="name"),
        _str("info", default=""),
        _str("notes", default=""),
        _int("priority", default=10),
        _bool("reboot_required", default=False),
        _bool("fill_user_template", default=False),
        _bool("fill_existing_users", default=False),
        _bool("boot_volume_required", default=False),
        _bool("allow_uninstalled", default=False),
        _str("os_requirements", default=""),
        _bool("install_if_reported_available", default=False),
    ),
)

COMPUTER_EXTENSION_ATTRIBUTE = ResourceKind(
    name="computer_extension_attribute",
    path="JSSResource/computerextensionattributes",
    list_key=("computer_extension_attributes",),
    detail_key="computer_extension_attribute",
    cloud_name_field="ea_name",
    fields=(
        _bool("enabled", default=True),
        _str("description", default=""),
        _str("data_type", choices=("String", "Integer", "Date")),
        _str("ea_type", at=("input_type",), wire="type",
             choices=("Text Field", "Pop-up Menu", "script", "LDAP Attribute Mapping")),
        _str("platform", at=("input_type",), default="Mac"),
        _str("script", at=("input_type",)),
        _str("inventory_display"),
    ),
    rules=(
        Coerce("ea_type", ("script",), {"script": ""}, negate=True),
    ),
)

RESTRICTED_SOFTWARE = ResourceKind(
    name="restricted_software",
    path="JSSResource/restrictedsoftware",
    list_key=("restricted_software",),
    detail_key="restricted_software",
    name_path=("general", "name"),
    fields=(
        _str("process_name", at=("general",), required=True),
        _bool("match_exact_process_name", at=("general",), default=False),
        _bool("send_notification", at=("general",), default=False),
        _bool("kill_process", at=("general",), default=True),
        _bool("delete_executable", at=("general",), default=False),
        _str("display_message", at=("general",), default=""),
        _bool("all_computers", at=("scope",), default=False),
    )
    + _scope("scoped", ("scope",), ("computers", "computer_groups", "buildings", "departments"))
    + _scope("excluded", ("scope", "exclusions"),
             ("computers", "computer_groups", "buildings", "departments", "users")),
)

# === Advanced searches ===

ADVANCED_MOBILE_DEVICE_SEARCH = ResourceKind(
    name="advanced_mobile_device_search",
    path="JSSResource/advancedmobiledevicesearches",
    list_key=("advanced_mobile_device_searches",),
    detail_key="advanced_mobile_device_search",
    cloud_name_field="mobile_search_name",
    fields=(
        RecordListField(
            name="criteria",
            path=("criteria",),
            item_tag="criterion",
            sort_key="priority",
            required=True,
            keys=(
                RecordKey("name"),
                RecordKey("priority", int),
                RecordKey("and_or", choices=("and", "or")),
                RecordKey("search_type"),
                RecordKey("value"),
                RecordKey("opening_paren", bool),
                RecordKey("closing_paren", bool),
            ),
        ),
    ),
)

# === Directory services ===

LDAP_SERVER = ResourceKind(
    name="ldap_server",
    path="JSSResource/ldapservers",
    list_key=("ldap_servers",),
    detail_key="ldap_server",
    name_path=("connection", "name"),
    cloud_name_field="ldap_name",
    fields=(
        _str("hostname", at=("connection",), required=True),
        _str("server_type", at=("connection",), required=True, wire_values={
            "active_directory": "Active Directory",
            "open_directory": "Open Directory",
            "edirectory": "eDirectory",
            "custom": "Custom",
        }),
        _int("port", at=("connection",), default=636),
        _bool("use_ssl", at=("connection",), default=False),
        _str("authentication_type", at=("connection",), default="simple", wire_values={
            "simple": "simple",
            "cram_md5": "CRAM-MD5",
            "digest_md5": "DIGEST-MD5",
            "none": "none",
        }),
        _str("account_dn", at=("connection", "account"), wire="distinguished_username"),
        StringField(
            name="account_password",
            path=("connection", "account", "password"),
            read_path=("connection", "account", "password_sha256"),
            digest="sha256",
            sensitive=True,
        ),
        _int("open_close_timeout", at=("connection",), default=15),
        _int("search_timeout", at=("connection",), default=60),
        _str("referral_response", at=("connection",), choices=("ignore", "follow")),
        _bool("use_wildcards", at=("connection",), default=True),
        MappingField(name="user_mappings", path=("mappings_for_users", "user_mappings")),
        MappingField(name="user_group_mappings", path=("mappings_for_users", "user_group_mappings")),
        MappingField(
            name="user_group_membership_mappings",
            path=("mappings_for_users", "user_group_membership_mappings"),
        ),
    ),
)

# === File shares ===

DISTRIBUTION_POINT = ResourceKind(
    name="distribution_point",
    path="JSSResource/distributionpoints",
    list_key=("distribution_points",),
    detail_key="distribution_point",
    cloud_name_field="dp_name",
    fields=(
        _str("ip_address", required=True),
        _bool("is_master", default=False),
        _str("connection_type", choices=("AFP", "SMB")),
        _str("share_name"),
        _str("workgroup_or_domain"),
        _int("share_port"),
        _str("read_only_username"),
        StringField(
            name="read_only_password",
            read_path=("read_only_password_sha256",),
            digest="sha256",
            sensitive=True,
        ),
        _str("read_write_username"),
        StringField(
            name="read_write_password",
            read_path=("read_write_password_sha256",),
            digest="sha256",
            sensitive=True,
        ),
        _bool("http_downloads_enabled", default=False),
        _str("http_context", wire="context"),
        _str("http_protocol", wire="protocol", default="http", choices=("http", "https")),
        _int("http_port", wire="port", default=80),
        _bool("no_authentication_required", default=True),
        _bool("username_password_required", default=False),
        _str("http_username", default_from="read_only_username"),
        StringField(
            name="http_password",
            read_path=("http_password_sha256",),
            digest="sha256",
            sensitive=True,
            default_from="read_only_password",
        ),
    ),
    rules=(
        Coerce("http_downloads_enabled", (False,), {"http_context": ""}),
        Coerce("no_authentication_required", (True,), {
            "username_password_required": False,
            "http_username": "",
            "http_password": "",
        }),
    ),
)

# Failover settings live on an existing distribution point; this kind never
# creates or deletes the point itself.
DISTRIBUTION_POINT_FAILOVER = ResourceKind(
    name="distribution_point_failover",
    path="JSSResource/distributionpoints",
    list_key=("distribution_points",),
    detail_key="distribution_point",
    name_path=None,
    cloud_name_field="dpf_name",
    creatable=False,
    deletable=False,
    fields=(
        _str("failover_point", default=""),
        _bool("enable_load_balancing", default=False),
        _bool("no_authentication_required", default=True),
        _bool("username_password_required", default=False),
    ),
    rules=(
        Coerce("no_authentication_required", (True,), {"username_password_required": False}),
    ),
)

# === Policies and profiles ===

_GENERAL = ("general",)
_LIMITS = ("date_time_limitations",)
_REBOOT = ("reboot",)
_MAINT = ("maintenance",)
_FILES = ("files_processes",)
_UI = ("user_interaction",)
_SELF = ("self_service",)

POLICY_FREQUENCIES = (
    "Ongoing",
    "Once per computer",
    "Once per user per computer",
    "Once per user",
    "Once every day",
    "Once every week",
    "Once every month",
)
STARTUP_DISKS = (
    "Current Startup Disk",
    "Currently Selected Startup Disk (No Bless)",
    "NetBoot",
    "macOS Installer",
    "Specify Local Startup Disk",
)
RESTART_ACTIONS = (
    "Restart if a package or update requires it",
    "Do not restart",
    "Restart immediately",
)
WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

POLICY = ResourceKind(
    name="policy",
    path="JSSResource/policies",
    list_key=("policies",),
    detail_key="policy",
    name_path=("general", "name"),
    cloud_name_field="policy_name",
    fields=(
        _bool("enabled", at=_GENERAL, default=False),
        _str("trigger", at=_GENERAL),
        _bool("trigger_checkin", at=_GENERAL, default=False),
        _bool("trigger_enrollment", at=_GENERAL, wire="trigger_enrollment_complete", default=False),
        _bool("trigger_login", at=_GENERAL, default=False),
        _bool("trigger_logout", at=_GENERAL, default=False),
        _bool("trigger_network_state", at=_GENERAL, wire="trigger_network_state_changed", default=False),
        _bool("trigger_startup", at=_GENERAL, default=False),
        _str("trigger_other", at=_GENERAL),
        _str("frequency", at=_GENERAL, choices=POLICY_FREQUENCIES),
        _str("retry_event", at=_GENERAL, default="none", choices=("none", "check-in", "trigger")),
        _int("retry_attempts", at=_GENERAL, default=-1),
        _bool("notify_on_each_failed_retry", at=_GENERAL, default=False),
        _str("target_drive", at=_GENERAL, default="/"),
        _bool("offline", at=_GENERAL, default=False),
        StringField(name="category", path=_GENERAL + ("category", "name")),
        _str("activation_date", at=_GENERAL + _LIMITS, default=""),
        _str("expiration_date", at=_GENERAL + _LIMITS, default=""),
        RecordListField(
            name="no_execute_on",
            path=_GENERAL + _LIMITS + ("no_execute_on",),
            default=[],
            sort_key="day",
            keys=(RecordKey("day", choices=WEEKDAYS),),
        ),
        _str("no_execute_start", at=_GENERAL + _LIMITS, default=""),
        _str("no_execute_end", at=_GENERAL + _LIMITS, default=""),
        # Scope
        _bool("all_computers", at=("scope",), default=False),
    )
    + _scope("scoped", ("scope",), ("computers", "computer_groups", "buildings", "departments"))
    + _scope("limited", ("scope", "limitations"),
             ("users", "user_groups", "network_segments", "ibeacons"))
    + _scope("excluded", ("scope", "exclusions"),
             ("computers", "computer_groups", "buildings", "departments",
              "users", "user_groups", "network_segments", "ibeacons"))
    + (
        # Self Service
        _bool("self_service", at=_SELF, wire="use_for_self_service", default=False),
        _str("self_service_display_name", at=_SELF),
        _str("install_button_text", at=_SELF, default="Install"),
        _str("reinstall_button_text", at=_SELF, default="Reinstall"),
        _str("self_service_description", at=_SELF),
        _bool("force_users_to_view_description", at=_SELF, default=False),
        _bool("feature_on_main_page", at=_SELF, default=False),
        RecordListField(
            name="self_service_categories",
            path=_SELF + ("self_service_categories",),
            item_tag="category",
            keys=(
                RecordKey("name"),
                RecordKey("display_in", bool),
                RecordKey("feature_in", bool),
            ),
        ),
        # Payloads
        RecordListField(
            name="packages",
            path=("package_configuration", "packages"),
            item_tag="package",
            default=[],
            keys=(
                RecordKey("name"),
                RecordKey("action", choices=("Install", "Cache", "Install Cached")),
                RecordKey("fut", bool),
                RecordKey("feu", bool),
            ),
        ),
        RecordListField(
            name="scripts",
            path=("scripts",),
            item_tag="script",
            default=[],
            keys=(
                RecordKey("name"),
                RecordKey("priority", default="After", choices=("Before", "After")),
            ) + tuple(RecordKey(f"parameter{n}", default="") for n in range(4, 12)),
        ),
        RecordListField(
            name="printers",
            path=("printers",),
            item_tag="printer",
            keys=(
                RecordKey("name"),
                RecordKey("action", default="install", choices=("install", "uninstall")),
                RecordKey("make_default", bool, default=False),
            ),
        ),
        # Restart
        _str("reboot_message", at=_REBOOT, wire="message",
             default="This computer will restart in 5 minutes. Please save anything you are "
                     "working on and log out by choosing Log Out from the bottom of the Apple menu."),
        _str("startup_disk", at=_REBOOT, default="Current Startup Disk", choices=STARTUP_DISKS),
        _str("specify_startup", at=_REBOOT, default=""),
        _str("no_user_logged_in_action", at=_REBOOT, wire="no_user_logged_in",
             default="Do not restart", choices=RESTART_ACTIONS),
        _str("user_logged_in_action", at=_REBOOT, wire="user_logged_in",
             default="Do not restart", choices=RESTART_ACTIONS + ("Restart",)),
        _int("minutes_until_reboot", at=_REBOOT, default=5),
        _bool("start_reboot_timer_immediately", at=_REBOOT, default=False),
        _bool("file_vault_2_reboot", at=_REBOOT, default=False),
        # Maintenance
        _bool("recon", at=_MAINT, default=False),
        _bool("reset_name", at=_MAINT, default=False),
        _bool("install_all_cached_packages", at=_MAINT, default=False),
        _bool("fix_permissions", at=_MAINT, wire="permissions", default=False),
        _bool("fix_byhost", at=_MAINT, wire="byhost", default=False),
        _bool("flush_system_cache", at=_MAINT, wire="system_cache", default=False),
        _bool("flush_user_cache", at=_MAINT, wire="user_cache", default=False),
        _bool("verify_startup_disk", at=_MAINT, wire="verify", default=False),
        # Files and processes
        _str("search_by_path", at=_FILES, default=""),
        _bool("delete_file", at=_FILES, default=False),
        _str("locate_file", at=_FILES, default=""),
        _bool("update_locate_database", at=_FILES, default=False),
        _str("spotlight_search", at=_FILES, default=""),
        _str("search_for_process", at=_FILES, default=""),
        _bool("kill_process", at=_FILES, default=False),
        _str("run_command", at=_FILES, default=""),
        # User interaction
        _str("policy_start_message", at=_UI, wire="message_start", default=""),
        _bool("allow_users_to_defer", at=_UI, default=False),
        _str("allow_deferral_until_utc", at=_UI, default=""),
        _int("allow_deferral_minutes", at=_UI, default=0),
        _str("policy_complete_message", at=_UI, wire="message_finish", default=""),
    ),
    rules=(
        Coerce("startup_disk", ("Specify Local Startup Disk",), {"specify_startup": ""}, negate=True),
    ),
)

COMPUTER_CONFIGURATION_PROFILE = ResourceKind(
    name="computer_configuration_profile",
    path="JSSResource/osxconfigurationprofiles",
    list_key=("os_x_configuration_profiles",),
    detail_key="os_x_configuration_profile",
    name_path=("general", "name"),
    cloud_name_field="config_profile_name",
    fields=(
        StringField(name="category", path=_GENERAL + ("category", "name")),
        _str("description", at=_GENERAL, default=""),
        _str("distribution_method", at=_GENERAL,
             choices=("Install Automatically", "Make Available in Self Service")),
        _bool("user_removable", at=_GENERAL),
        _str("level", at=_GENERAL, choices=("System", "User")),
        _str("redeploy_on_update", at=_GENERAL, choices=("Newly Assigned", "All")),
        _str("payloads", at=_GENERAL, xml_document=True),
        _bool("all_computers", at=("scope",), default=False),
        _bool("all_jss_users", at=("scope",), default=False),
    )
    + _scope("scoped", ("scope",),
             ("computers", "computer_groups", "buildings", "departments", "jss_users", "jss_user_groups"))
    + _scope("limited", ("scope", "limitations"),
             ("users", "user_groups", "network_segments", "ibeacons"))
    + _scope("excluded", ("scope", "exclusions"),
             ("computers", "computer_groups", "buildings", "departments", "users", "user_groups",
              "network_segments", "ibeacons", "jss_users", "jss_user_groups")),
    rules=(
        Coerce("distribution_method", ("Make Available in Self Service",),
               {"user_removable": False}, negate=True),
    ),
)

# === Settings pages ===

SMTP_SERVER = ResourceKind(
    name="smtp_server",
    path="JSSResource/smtpserver",
    detail_key="smtp_server",
    singleton=True,
    name_path=None,
    fields=(
        _bool("enabled", default=False),
        _str("host"),
        _int("port"),
        _int("timeout", default=10),
        _bool("authorization_required", default=False),
        _str("username"),
        # The server never reports the password back, so it is written but not compared.
        _str("password", sensitive=True, compare=False),
        _int("encryption", choices=(0, 1, 2, 3, 4)),
        _bool("ssl"),
        _bool("tls"),
        _str("send_from_name"),
        _str("send_from_email"),
    ),
    rules=(
        Coerce("enabled", (False,), {
            "host": "",
            "port": 25,
            "authorization_required": False,
            "encryption": 0,
            "send_from_name": "",
            "send_from_email": "",
        }),
        Coerce("authorization_required", (False,), {"username": "", "password": ""}),
        Coerce("encryption", (1,), {"ssl": False}, negate=True),
        Coerce("encryption", (2, 3, 4), {"tls": False}, negate=True),
    ),
    constraints=(
        Constraint(field="ssl", switch="encryption", values=(1,), allowed=(False,)),
        Constraint(field="tls", switch="encryption", values=(2, 3, 4), allowed=(False,)),
    ),
)

COMPUTER_CHECKIN = ResourceKind(
    name="computer_checkin",
    path="JSSResource/computercheckin",
    detail_key="computer_check_in",
    singleton=True,
    name_path=None,
    fields=(
        _int("check_in_frequency", default=15, choices=(5, 15, 30, 60)),
        _bool("create_startup_script", default=True),
        _bool("log_startup_event", default=True),
        _bool("check_for_policies_at_startup", default=True),
        _bool("apply_computer_level_managed_preferences"),
        _bool("ensure_ssh_is_enabled", default=True),
        _bool("create_login_logout_hooks", default=True),
        _bool("log_username", default=True),
        _bool("check_for_policies_at_login_logout", default=True),
        _bool("apply_user_level_managed_preferences"),
        _bool("hide_restore_partition"),
        _bool("perform_login_actions_in_background"),
        _bool("display_status_to_user", default=True),
    ),
    rules=(
        Coerce("create_startup_script", (False,), {
            "log_startup_event": False,
            "check_for_policies_at_startup": False,
            "ensure_ssh_is_enabled": False,
        }),
        Coerce("create_login_logout_hooks", (False,), {
            "log_username": False,
            "check_for_policies_at_login_logout": False,
            "display_status_to_user": False,
        }),
    ),
)


def _search_paths(name: str, wire: str, item_tag: str) -> RecordListField:
    return RecordListField(
        name=name,
        path=(wire,),
        item_tag=item_tag,
        default=[],
        sort_key="path",
        keys=(RecordKey("path"), RecordKey("platform")),
    )


COMPUTER_INVENTORY_COLLECTION = ResourceKind(
    name="computer_inventory_collection",
    path="JSSResource/computerinventorycollection",
    detail_key="computer_inventory_collection",
    singleton=True,
    name_path=None,
    fields=(
        _bool("local_user_accounts", default=True),
        _bool("home_directory_sizes", default=True),
        _bool("hidden_accounts", default=True),
        _bool("printers", default=True),
        _bool("active_services", default=True),
        _bool("mobile_device_app_purchasing_info", default=False),
        _bool("computer_location_information", default=True),
        _bool("package_receipts", default=True),
        _bool("available_software_updates", default=False),
        _bool("include_applications", default=True),
        _bool("include_fonts", default=False),
        _bool("include_plugins", default=False),
        _bool("allow_changing_user_and_location", default=True),
        _search_paths("custom_search_applications", "applications", "application"),
        _search_paths("custom_search_fonts", "fonts", "font"),
        _search_paths("custom_search_plugins", "plugins", "plugin"),
    ),
    rules=(
        Coerce("local_user_accounts", (False,), {
            "home_directory_sizes": False,
            "hidden_accounts": False,
        }),
    ),
)

REENROLLMENT = ResourceKind(
    name="reenrollment",
    path="api/v1/reenrollment",
    detail_key=None,
    wire_format=WireFormat.JSON,
    singleton=True,
    name_path=None,
    fields=(
        _bool("flush_location_information", wire="isFlushLocationInformationEnabled", default=True),
        _bool("flush_location_information_history",
              wire="isFlushLocationInformationHistoryEnabled", default=True),
        _bool("flush_policy_logs", wire="isFlushPolicyHistoryEnabled", default=True),
        _bool("flush_extension_attributes", wire="isFlushExtensionAttributesEnabled", default=True),
        _str("flush_mdm_queue", wire="flushMDMQueue", default="DELETE_EVERYTHING", choices=(
            "DELETE_NOTHING",
            "DELETE_ERRORS",
            "DELETE_EVERYTHING_EXCEPT_ACKNOWLEDGED",
            "DELETE_EVERYTHING",
        )),
    ),
)

ACTIVATION = ResourceKind(
    name="activation",
    path="JSSResource/activationcode",
    detail_key="activation_code",
    singleton=True,
    name_path=None,
    fields=(
        StringField(
            name="organization_name",
            path=("organization",),
            read_path=("organization_name",),
            default_from="name",
        ),
        StringField(name="activation_code", path=("code",), required=True, sensitive=True),
    ),
)


KINDS: dict[str, ResourceKind] = {
    kind.name: kind
    for kind in (
        ACCOUNT,
        ACCOUNT_GROUP,
        ACTIVATION,
        ADVANCED_MOBILE_DEVICE_SEARCH,
        BUILDING,
        CATEGORY,
        COMPUTER_CHECKIN,
        COMPUTER_CONFIGURATION_PROFILE,
        COMPUTER_EXTENSION_ATTRIBUTE,
        COMPUTER_INVENTORY_COLLECTION,
        DEPARTMENT,
        DISTRIBUTION_POINT,
        DISTRIBUTION_POINT_FAILOVER,
        LDAP_SERVER,
        NETWORK_SEGMENT,
        PACKAGE,
        POLICY,
        REENROLLMENT,
        RESTRICTED_SOFTWARE,
        SCRIPT,
        SMTP_SERVER,
    )
}


def get_kind(name: str) -> ResourceKind:
    """Look up a resource kind, accepting an optional ``jamf_`` prefix."""
    key = name[len("jamf_"):] if name.startswith("jamf_") else name
    try:
        return KINDS[key]
    except KeyError:
        raise ParseError(
            f"Unknown resource kind: {name}. Supported: {', '.join(sorted(KINDS))}"
        ) from None
