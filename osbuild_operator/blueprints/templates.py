"""Built-in blueprint templates.

Templates are Jinja2 text rendered against the ImageBuilderImage spec
fields (snake_case). The output is an osbuild-composer blueprint in TOML.
"""

DEFAULT_BLUEPRINT_TEMPLATE = """\
name = "{{ name }}"
version = "0.0.1"
modules = []
groups = []

[[customizations.sshkey]]
user = "{{ user_name }}"
key = "{{ ssh_key }}"
"""

DEFAULT_ISO_BLUEPRINT_TEMPLATE = """\
name = "{{ name }}-iso"
version = "0.0.1"
modules = []
groups = []
distro = ""

[customizations]
installation_device = "{{ installation_device }}"

[customizations.fdo]
manufacturing_server_url = "{{ fdo_manufacturing_server_url }}"
diun_pub_key_insecure = "true"
"""

__all__ = ["DEFAULT_BLUEPRINT_TEMPLATE", "DEFAULT_ISO_BLUEPRINT_TEMPLATE"]
