"""Configuration compiler tests."""

import os
import pytest

from proxy_sidecar.haproxy import CompilerOptions, ConfigCompiler, ConfigReader
from proxy_sidecar.registry import Service, ServiceDest
from proxy_sidecar.shared.exceptions import ConfigError, ProxyIOError

from support import DUMMY_CONTENT, FRAGMENTS_CONTENT, TEMPLATE_CONTENT, read_file


@pytest.mark.compiler
class TestCompileTemplate:
    """Template handling, fragments and the dummy backend."""

    def test_writes_template_and_fragments_into_file(self, compiler, paths, fragments):
        assert compiler.compile() is True

        assert read_file(paths["config_file"]) == TEMPLATE_CONTENT + FRAGMENTS_CONTENT

    def test_fragments_are_frontends_first_then_backends(self, compiler, paths):
        for name in ("b-be.cfg", "a-be.cfg", "b-fe.cfg", "a-fe.cfg", "notes.txt"):
            with open(os.path.join(paths["templates"], name), "w") as f:
                f.write(name)

        text = compiler.render().text

        assert text == TEMPLATE_CONTENT + "\n\na-fe.cfg\n\nb-fe.cfg\n\na-be.cfg\n\nb-be.cfg"

    def test_writes_dummy_backend_when_nothing_is_registered(self, compiler, paths):
        compiler.compile()

        assert read_file(paths["config_file"]) == TEMPLATE_CONTENT + DUMMY_CONTENT

    def test_omits_dummy_backend_when_services_are_registered(self, compiler, registry):
        registry.add_service(Service(
            service_name="svc",
            path_type="path_beg",
            service_dest=[ServiceDest(port="1111", service_path=["/p"])],
        ))

        text = compiler.render().text

        assert "dummy-be" not in text
        assert text.endswith("use_backend svc-be1111 if url_svc1111")

    def test_reads_fragments_from_separate_directory(self, registry, paths, tmp_path):
        fragments_dir = tmp_path / "fragments"
        fragments_dir.mkdir()
        (fragments_dir / "svc-fe.cfg").write_text("svc fe")
        compiler = ConfigCompiler(
            registry,
            templates_path=paths["templates"],
            configs_path=paths["configs"],
            fragments_path=str(fragments_dir),
        )

        assert compiler.render().text == TEMPLATE_CONTENT + "\n\nsvc fe"

    def test_returns_error_when_template_is_missing(self, compiler, paths):
        os.remove(os.path.join(paths["templates"], "haproxy.tmpl"))

        with pytest.raises(ConfigError):
            compiler.compile()
        assert not os.path.exists(paths["config_file"])

    def test_returns_error_when_fragments_dir_cannot_be_read(self, registry, paths, tmp_path):
        compiler = ConfigCompiler(
            registry,
            templates_path=paths["templates"],
            configs_path=paths["configs"],
            fragments_path=str(tmp_path / "does-not-exist"),
        )

        with pytest.raises(ConfigError):
            compiler.compile()
        assert not os.path.exists(paths["config_file"])

    def test_returns_error_when_fragment_cannot_be_read(self, compiler, paths):
        # A directory with a fragment name is listed but cannot be read as a file
        os.mkdir(os.path.join(paths["templates"], "broken-fe.cfg"))

        with pytest.raises(ProxyIOError) as exc_info:
            compiler.compile()
        assert exc_info.value.path.endswith("broken-fe.cfg")

    def test_returns_error_when_write_fails(self, registry, paths, tmp_path):
        compiler = ConfigCompiler(
            registry,
            templates_path=paths["templates"],
            configs_path=str(tmp_path / "missing-dir"),
        )

        with pytest.raises(ProxyIOError):
            compiler.compile()

    def test_compile_is_deterministic(self, compiler, registry, paths, fragments, monkeypatch):
        monkeypatch.setenv("TIMEOUT_CONNECT", "10")
        for name in ("b-svc", "a-svc"):
            registry.add_service(Service(
                service_name=name,
                service_domain=["x.com"],
                service_dest=[ServiceDest(port="80", service_path=["/x"])],
            ))
        registry.add_cert("b.pem")
        registry.add_cert("a.pem")

        compiler.compile()
        first = read_file(paths["config_file"])
        compiler.compile()

        assert read_file(paths["config_file"]) == first
        assert first.index("url_a-svc80") < first.index("url_b-svc80")


@pytest.mark.compiler
class TestCompileOptions:
    """Environment-driven template rewrites."""

    def test_adds_debug(self, compiler, monkeypatch, fragments):
        monkeypatch.setenv("DEBUG", "true")
        expected = TEMPLATE_CONTENT.replace(
            "tune.ssl.default-dh-param 2048",
            "tune.ssl.default-dh-param 2048\n    debug",
        ).replace("    option  dontlognull\n    option  dontlog-normal\n", "")

        assert compiler.render().text == expected + FRAGMENTS_CONTENT

    def test_adds_extra_frontend(self, compiler, monkeypatch, fragments):
        monkeypatch.setenv("EXTRA_FRONTEND", "this is an extra content")

        assert compiler.render().text == TEMPLATE_CONTENT + "this is an extra content" + FRAGMENTS_CONTENT

    def test_adds_bind_ports_after_existing_binds(self, compiler, monkeypatch, fragments):
        monkeypatch.setenv("BIND_PORTS", "1234,4321")
        expected = TEMPLATE_CONTENT.replace(
            "    bind *:443\n",
            "    bind *:443\n    bind *:1234\n    bind *:4321\n",
        )

        assert compiler.render().text == expected + FRAGMENTS_CONTENT

    def test_adds_user_list(self, compiler, monkeypatch, fragments):
        monkeypatch.setenv("USERS", "my-user-1:my-password-1,my-user-2:my-password-2")
        expected = TEMPLATE_CONTENT.replace(
            "frontend services",
            "userlist defaultUsers\n"
            "    user my-user-1 insecure-password my-password-1\n"
            "    user my-user-2 insecure-password my-password-2\n"
            "\n"
            "frontend services",
        )

        assert compiler.render().text == expected + FRAGMENTS_CONTENT

    def test_adds_cert(self, registry, compiler, paths, fragments):
        registry.add_cert("my-cert.pem")
        cert_path = os.path.join(paths["certs"], "my-cert.pem")

        text = compiler.render().text

        assert text == TEMPLATE_CONTENT.replace("bind *:443", f"bind *:443 ssl crt {cert_path}") + FRAGMENTS_CONTENT
        assert "    bind *:80\n" in text

    def test_adds_every_cert_to_https_bind(self, registry, compiler, paths, fragments):
        registry.add_cert("b.pem")
        registry.add_cert("a.pem")
        certs = paths["certs"]

        text = compiler.render().text

        assert f"    bind *:443 ssl crt {certs}/a.pem crt {certs}/b.pem\n" in text

    @pytest.mark.parametrize("env_key,before,after,value", [
        ("TIMEOUT_CONNECT", "timeout connect 5s", "timeout connect 999s", "999"),
        ("TIMEOUT_CLIENT", "timeout client  20s", "timeout client  999s", "999"),
        ("TIMEOUT_SERVER", "timeout server  20s", "timeout server  999s", "999"),
        ("TIMEOUT_QUEUE", "timeout queue   30s", "timeout queue   999s", "999"),
        ("TIMEOUT_HTTP_REQUEST", "timeout http-request 5s", "timeout http-request 999s", "999"),
        ("TIMEOUT_HTTP_KEEP_ALIVE", "timeout http-keep-alive 15s", "timeout http-keep-alive 999s", "999"),
        ("STATS_USER", "stats auth admin:admin", "stats auth my-user:admin", "my-user"),
        ("STATS_PASS", "stats auth admin:admin", "stats auth admin:my-pass", "my-pass"),
    ])
    def test_replaces_values_with_env_vars(self, compiler, monkeypatch, fragments, env_key, before, after, value):
        monkeypatch.setenv(env_key, value)

        assert compiler.render().text == TEMPLATE_CONTENT.replace(before, after) + FRAGMENTS_CONTENT

    @pytest.mark.parametrize("env_key,value", [
        ("TIMEOUT_CONNECT", "5m"),
        ("BIND_PORTS", "http"),
        ("USERS", "bogus"),
    ])
    def test_malformed_env_option_is_a_config_error(self, compiler, paths, monkeypatch, env_key, value):
        monkeypatch.setenv(env_key, value)

        with pytest.raises(ConfigError):
            compiler.render()
        with pytest.raises(ConfigError):
            compiler.compile()
        assert not os.path.exists(paths["config_file"])

    def test_explicit_options_override_environment(self, registry, paths, monkeypatch, fragments):
        monkeypatch.setenv("TIMEOUT_CONNECT", "999")
        compiler = ConfigCompiler(
            registry,
            templates_path=paths["templates"],
            configs_path=paths["configs"],
            options=CompilerOptions(timeouts={"connect": "7"}),
        )

        assert "timeout connect 7s" in compiler.render().text


@pytest.mark.compiler
class TestCompileFrontends:
    """Frontend body generated from registered services."""

    def test_adds_content_frontend(self, registry, compiler, fragments):
        registry.add_service(Service(
            service_name="my-service-1",
            path_type="path_beg",
            acl_name="my-acl",
            service_dest=[
                ServiceDest(port="1111", service_path=["/path-1", "/path-2"],
                            src_port_acl=" port1111Acl", src_port_acl_name=" my-src-port"),
                ServiceDest(port="2222", service_path=["/path-3"], src_port_acl=" port2222Acl"),
            ],
        ))
        expected = (
            TEMPLATE_CONTENT
            + "\n    acl url_my-service-11111 path_beg /path-1 path_beg /path-2 port1111Acl"
            + "\n    acl url_my-service-12222 path_beg /path-3 port2222Acl"
            + "\n    use_backend my-acl-be1111 if url_my-service-11111 my-src-port"
            + "\n    use_backend my-acl-be2222 if url_my-service-12222"
            + FRAGMENTS_CONTENT
        )

        assert compiler.render().text == expected

    def test_adds_content_frontend_tcp(self, registry, compiler, fragments):
        registry.add_service(Service(
            service_name="svc",
            req_mode="tcp",
            service_dest=[ServiceDest(src_port=1234, port="4321")],
        ))
        expected = (
            TEMPLATE_CONTENT
            + "\n\nfrontend svc_1234"
            + "\n    bind *:1234"
            + "\n    mode tcp"
            + "\n    default_backend svc-be4321"
            + FRAGMENTS_CONTENT
        )

        assert compiler.render().text == expected

    def test_adds_content_frontend_with_domain(self, registry, compiler, fragments):
        registry.add_service(Service(
            service_name="my-service",
            service_domain=["a.com", "b.com"],
            path_type="path_beg",
            service_dest=[ServiceDest(port="1111", service_path=["/path"])],
        ))
        expected = (
            TEMPLATE_CONTENT
            + "\n    acl url_my-service1111 path_beg /path"
            + "\n    acl domain_my-service hdr_dom(host) -i a.com b.com"
            + "\n    use_backend my-service-be1111 if url_my-service1111 domain_my-service"
            + FRAGMENTS_CONTENT
        )

        assert compiler.render().text == expected

    def test_adds_content_frontend_with_domain_wildcard(self, registry, compiler, fragments):
        registry.add_service(Service(service_name="my-service", service_domain=["*example.com"]))
        expected = (
            TEMPLATE_CONTENT
            + "\n    acl domain_my-service hdr_end(host) -i example.com"
            + FRAGMENTS_CONTENT
        )

        assert compiler.render().text == expected

    def test_adds_content_frontend_with_https_port(self, registry, compiler, fragments):
        registry.add_service(Service(
            service_name="my-service",
            path_type="path_beg",
            https_port=2222,
            service_dest=[ServiceDest(port="1111", service_path=["/path"])],
        ))
        expected = (
            TEMPLATE_CONTENT
            + "\n    acl url_my-service1111 path_beg /path"
            + "\n    acl http_my-service src_port 80"
            + "\n    acl https_my-service src_port 2222"
            + "\n    use_backend my-service-be1111 if url_my-service1111 http_my-service"
            + "\n    use_backend https-my-service-be1111 if url_my-service1111 https_my-service"
            + FRAGMENTS_CONTENT
        )

        assert compiler.render().text == expected

    def test_acl_name_only_prefixes_backends(self, registry, compiler):
        for name in ("api-v1", "api-v2"):
            registry.add_service(Service(
                service_name=name,
                acl_name="api",
                service_domain=[f"{name}.example.com"],
                https_port=8443,
                service_dest=[ServiceDest(port="80")],
            ))

        text = compiler.render().text

        assert "acl domain_api-v1 hdr_dom(host) -i api-v1.example.com" in text
        assert "acl domain_api-v2 hdr_dom(host) -i api-v2.example.com" in text
        assert "acl https_api-v1 src_port 8443" in text
        assert "use_backend https-api-be80 if domain_api-v2 https_api-v2" in text
        assert "domain_api " not in text

    def test_services_are_rendered_in_name_order(self, registry, compiler):
        registry.add_service(Service(service_name="b", req_mode="tcp", service_dest=[ServiceDest(src_port=2, port="2")]))
        registry.add_service(Service(service_name="a", req_mode="tcp", service_dest=[ServiceDest(src_port=1, port="1")]))

        text = compiler.render().text

        assert text.index("frontend a_1") < text.index("frontend b_2")


@pytest.mark.compiler
class TestConfigReader:

    def test_read_config_returns_config(self, paths):
        expected = "template content\n\nconfig1 content\n\nconfig2 content"
        with open(paths["config_file"], "w") as f:
            f.write(expected)

        reader = ConfigReader(paths["configs"])

        assert reader.config_path == paths["config_file"]
        assert reader.read_config() == expected

    def test_read_config_returns_error_when_file_is_missing(self, paths):
        with pytest.raises(ProxyIOError) as exc_info:
            ConfigReader(paths["configs"]).read_config()

        assert exc_info.value.path == paths["config_file"]

    def test_reads_back_what_compile_wrote(self, compiler, paths):
        compiler.compile()

        assert ConfigReader(paths["configs"]).read_config() == compiler.render().text
