"""Read privilege catalogs used by the ``*_read_all`` switches.

These lists mirror the read privileges a Jamf Pro 10.x server offers. When a
server release adds privileges, add a new catalog version and point
``CATALOG_VERSION`` at it rather than editing an existing one, so that a
manifest's meaning never changes underneath it.
"""

JSS_OBJECT_READ_PRIVILEGES_V1 = (
    "Read Advanced Computer Searches",
    "Read Advanced Mobile Device Searches",
    "Read Advanced User Searches",
    "Read Advanced User Content Searches",
    "Read AirPlay Permissions",
    "Read Allowed File Extension",
    "Read_API_Integrations",
    "Read Attachment Assignments",
    "Read Device Enrollment Program Instances",
    "Read Buildings",
    "Read Categories",
    "Read Classes",
    "Read Computer Enrollment Invitations",
    "Read Computer Extension Attributes",
    "Read Custom Paths",
    "Read Computer PreStage Enrollments",
    "Read Computers",
    "Read Departments",
    "Read Device Name Patterns",
    "Read Directory Bindings",
    "Read Disk Encryption Configurations",
    "Read Disk Encryption Institutional Configurations",
    "Read Dock Items",
    "Read eBooks",
    "Read Enrollment Customizations",
    "Read Enrollment Profiles",
    "Read Patch External Source",
    "Read File Attachments",
    "Read Distribution Points",
    "Read Push Certificates",
    "Read iBeacon",
    "Read Infrastructure Managers",
    "Read Inventory Preload Records",
    "Read VPP Invitations",
    "Read Jamf Connect Deployments",
    "Read Jamf Protect Deployments",
    "Read Accounts",
    "Read JSON Web Token Configuration",
    "Read Keystores",
    "Read LDAP Servers",
    "Read Licensed Software",
    "Read Mac Applications",
    "Read macOS Configuration Profiles",
    "Read Maintenance Pages",
    "Read Managed Preference Profiles",
    "Read Mobile Device Applications",
    "Read iOS Configuration Profiles",
    "Read Mobile Device Enrollment Invitations",
    "Read Mobile Device Extension Attributes",
    "Read Mobile Device Managed App Configurations",
    "Read Mobile Device PreStage Enrollments",
    "Read Mobile Devices",
    "Read Network Integration",
    "Read Network Segments",
    "Read Packages",
    "Read Patch Management Software Titles",
    "Read Patch Policies",
    "Read Peripheral Types",
    "Read Personal Device Configurations",
    "Read Personal Device Profiles",
    "Read Policies",
    "Read Printers",
    "Read Provisioning Profiles",
    "Read Remote Administration",
    "Read Removable MAC Address",
    "Read Restricted Software",
    "Read Scripts",
    "Read Self Service Bookmarks",
    "Read Self Service Branding Configuration",
    "Read Sites",
    "Read Smart Computer Groups",
    "Read Smart Mobile Device Groups",
    "Read Smart User Groups",
    "Read Software Update Servers",
    "Read Static Computer Groups",
    "Read Static Mobile Device Groups",
    "Read Static User Groups",
    "Read User Extension Attributes",
    "Read User",
    "Read VPP Assignment",
    "Read Volume Purchasing Administrator Accounts",
    "Read Webhooks",
)

JSS_SETTINGS_READ_PRIVILEGES_V1 = (
    "Read Activation Code",
    "Read Apache Tomcat Settings",
    "Read Apple Configurator Enrollment",
    "Read Education Settings",
    "Read Mobile Device App Maintenance Settings",
    "Read Automatic Mac App Updates Settings",
    "Read Automatically Renew MDM Profile Settings",
    "Read Cache",
    "Read Change Management",
    "Read Computer Check-In",
    "Read Cloud Distribution Point",
    "Read Cloud Services Settings",
    "Read Clustering",
    "Read Computer Inventory Collection",
    "Read Computer Inventory Collection Settings",
    "Read Conditional Access",
    "Read Customer Experience Metrics",
    "Read Device Compliance Information",
    "Read Engage Settings",
    "Read GSX Connection",
    "Read Patch Internal Source",
    "Read Jamf Connect Settings",
    "Read Parent App Settings",
    "Read Jamf Protect Settings",
    "Read JSS URL",
    "Read Teacher App Settings",
    "Read Limited Access Settings",
    "Read Retention Policy",
    "Read Mobile Device Inventory Collection",
    "Read Password Policy",
    "Read Patch Management Settings",
    "Read PKI",
    "Read Re-enrollment",
    "Read Computer Security",
    "Read Self Service",
    "Read App Request Settings",
    "Read Mobile Device Self Service",
    "Read SMTP Server",
    "Read SSO Settings",
    "Read User-Initiated Enrollment",
)

CATALOGS = {
    "v1": {
        "jss_objects": JSS_OBJECT_READ_PRIVILEGES_V1,
        "jss_settings": JSS_SETTINGS_READ_PRIVILEGES_V1,
    },
}

CATALOG_VERSION = "v1"


def read_privileges(section: str, version: str = CATALOG_VERSION) -> tuple[str, ...]:
    """Return the read privilege catalog for ``jss_objects`` or ``jss_settings``."""
    try:
        return CATALOGS[version][section]
    except KeyError:
        raise KeyError(f"No read privilege catalog '{section}' in version '{version}'") from None
