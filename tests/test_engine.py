from dataclasses import dataclass
from typing import Annotated, Optional

import pytest

from stratum.config import EngineConfig
from stratum.context import RenderContext
from stratum.domain import Inject
from stratum.engine import Engine
from stratum.errors import ConfigurationError, MissingDependencyError, TemplateError, TemplateNotFound
from stratum.extensions import Extension
from stratum.helpers import Escape, Fetch
from stratum.template import TemplateUnit, injected
from stratum.values import Text


class AppService:
    def __init__(self, name: str = "Demo"):
        self.name = name


@dataclass
class Hello(TemplateUnit):
    name: str

    def __call__(self):
        return f"Hello, {self.e(self.name)}!"


@dataclass
class NeedsApp(TemplateUnit):
    app: Annotated[AppService, Inject()] = injected()

    def __call__(self):
        return self.app.name


class OptionalTagline(TemplateUnit):
    tagline: Annotated[Optional[str], Inject()] = None

    def __call__(self):
        return self.tagline or "no tagline"


@dataclass
class Titled(TemplateUnit):
    title: Annotated[str, Inject(key="page_title", escape=True)] = injected()
    app: Annotated[AppService, Inject(escape=True)] = injected()

    def __call__(self):
        return f"<h1>{self.title}</h1>"


class ParameterStyle:
    def __init__(self, name: str):
        self.name = name

    def __call__(self, fetch: Fetch, e: Escape):
        return e(self.name) + " " + fetch(Hello(name="child"))


class GlobalParameter:
    def __call__(self, app: AppService, e: Escape):
        return e(app.name)


class SkipsOptionalParameter:
    def __call__(self, tagline: Optional[str] = None, e: Escape = None, app: AppService = None):
        return f"{tagline}|{e('<b>')}|{app.name}"


@dataclass(frozen=True)
class FrozenCard(TemplateUnit):
    title: str
    app: Annotated[AppService, Inject()] = injected()

    def __call__(self):
        return f"{self.e(self.title)} @ {self.app.name}"


class ShowsData(TemplateUnit):
    def __call__(self):
        return ",".join(f"{k}={v}" for k, v in sorted(self.context.data.items()))


class OtherShowsData(ShowsData):
    pass


class FetchesWithInheritance(TemplateUnit):
    def __call__(self):
        return self.fetch(ShowsData(), {"b": "child"})


class RendersWithoutInheritance(TemplateUnit):
    def __call__(self):
        return self.render(ShowsData(), {"b": "child"})


class CallsFunctions(TemplateUnit):
    def __call__(self):
        return "|".join(
            [
                self.call("shout", "hey"),
                self.batch("  Jonathan ", "strip|upper"),
                self.e("<strong>Jonathan</strong>", "upper"),
            ]
        )


class Greeter(Extension):
    def register(self, engine):
        engine.register_function("greet", self.greet)

    def greet(self, name):
        return f"{self.template.data.get('greeting', 'Hi')} {name}"


class Script:
    def __init__(self, body):
        self.body = body

    def __call__(self, fetch: Fetch):
        return self.body(fetch.context)


class UsesGreeter(TemplateUnit):
    def __call__(self):
        return self.call("greet", "Bob")


@pytest.fixture
def engine() -> Engine:
    return Engine(EngineConfig())


def test_render_returns_body_output(engine):
    assert engine.render(Hello(name="<World>")) == "Hello, &lt;World&gt;!"


def test_missing_global_names_type_slot_and_key(engine):
    with pytest.raises(MissingDependencyError, match=r'"NeedsApp" requires "app"') as excinfo:
        engine.render(NeedsApp())

    assert excinfo.value.unit_type is NeedsApp
    assert excinfo.value.slot_name == "app"
    assert excinfo.value.lookup_key == "app"
    assert isinstance(excinfo.value, TemplateError)


def test_global_is_injected_once_registered(engine):
    engine.add_global("app", AppService("Demo"))

    assert engine.render(NeedsApp()) == "Demo"


def test_globals_are_shared_references(engine):
    service = AppService()
    engine.add_global("app", service)
    unit = NeedsApp()

    engine.render(unit)

    assert unit.app is service
    assert engine.get_global("app") is service
    assert engine.get_globals() == {"app": service}


def test_optional_slot_is_skipped_when_global_is_missing(engine):
    assert engine.render(OptionalTagline()) == "no tagline"

    engine.add_global("tagline", "Fresh")
    assert engine.render(OptionalTagline()) == "Fresh"


def test_escaped_string_globals_are_wrapped_but_services_are_not(engine):
    service = AppService()
    engine.add_global("page_title", "<b>Hi</b>").add_global("app", service)
    unit = Titled()

    assert engine.render(unit) == "<h1>&lt;b&gt;Hi&lt;/b&gt;</h1>"
    assert isinstance(unit.title, Text)
    assert unit.title.raw() == "<b>Hi</b>"
    assert unit.app is service


def test_helpers_can_be_declared_as_render_parameters(engine):
    assert engine.render(ParameterStyle("<x>")) == "&lt;x&gt; Hello, child!"


def test_other_render_parameters_are_looked_up_as_globals(engine):
    with pytest.raises(MissingDependencyError, match='no global named "app"'):
        engine.render(GlobalParameter())

    engine.add_global("app", AppService("<Demo>"))
    assert engine.render(GlobalParameter()) == "&lt;Demo&gt;"


def test_optional_parameters_keep_their_defaults(engine):
    engine.add_global("app", AppService("Demo"))

    assert engine.render(SkipsOptionalParameter()) == "None|&lt;b&gt;|Demo"


def test_frozen_dataclass_units_are_injected(engine):
    engine.add_global("app", AppService("Demo"))

    assert engine.render(FrozenCard(title="A & B")) == "A &amp; B @ Demo"


def test_same_unit_instance_can_be_rendered_again(engine):
    engine.add_global("app", AppService("First"))
    unit = NeedsApp()
    assert engine.render(unit) == "First"

    engine.add_global("app", AppService("Second"))
    assert engine.render(unit) == "Second"


def test_unit_without_render_body_is_rejected(engine):
    class NotATemplate:
        pass

    with pytest.raises(TemplateError, match="does not define a render body"):
        engine.render(NotATemplate())


def test_make_returns_unrendered_context(engine):
    unit = ShowsData()

    context = engine.make(unit, {"a": 1})

    assert isinstance(context, RenderContext)
    assert context.unit is unit
    assert context.data == {"a": 1}
    assert context.render({"b": 2}) == "a=1,b=2"


def test_fetch_inherits_the_parent_data(engine):
    assert engine.render(FetchesWithInheritance(), {"a": "1", "b": "parent"}) == "a=1,b=child"


def test_render_helper_does_not_inherit_data(engine):
    assert engine.render(RendersWithoutInheritance(), {"a": "1"}) == "b=child"


def test_preassigned_data(engine):
    engine.add_data({"x": 1})
    engine.add_data({"y": 2}, ShowsData)

    assert engine.render(ShowsData()) == "x=1,y=2"
    assert engine.render(OtherShowsData()) == "x=1"
    assert engine.render(ShowsData(), {"y": 3}) == "x=1,y=3"
    assert engine.get_data() == {"x": 1}
    assert engine.get_data(ShowsData) == {"x": 1, "y": 2}


def test_named_templates(engine):
    engine.add_template("hello", lambda: Hello(name="named"))
    engine.add_template("data", ShowsData)
    engine.add_data({"k": "v"}, "data")

    assert engine.render("hello") == "Hello, named!"
    assert engine.render("data") == "k=v"


def test_unknown_template_name_raises(engine):
    engine.add_template("hello", lambda: Hello(name="named"))

    with pytest.raises(TemplateNotFound, match='"missing" is not registered') as excinfo:
        engine.render("missing")

    assert excinfo.value.template == "missing"
    assert excinfo.value.paths == ["hello"]


def test_template_names_must_be_unique(engine):
    engine.add_template("hello", ShowsData)

    with pytest.raises(ConfigurationError, match="already registered"):
        engine.add_template("hello", ShowsData)

    engine.remove_template("hello")
    with pytest.raises(ConfigurationError, match="was not found"):
        engine.remove_template("hello")


def test_functions_and_batch(engine):
    engine.register_function("shout", lambda value: value.upper() + "!")

    assert engine.does_function_exist("shout")
    assert engine.render(CallsFunctions()) == "HEY!|JONATHAN|&lt;STRONG&gt;JONATHAN&lt;/STRONG&gt;"


def test_registered_functions_take_precedence_in_batch(engine):
    engine.register_function("upper", lambda value: "custom")
    context = engine.make(ShowsData())

    assert context.batch("abc", "upper") == "custom"


def test_batch_rejects_unknown_function(engine):
    context = engine.make(ShowsData())

    with pytest.raises(TemplateError, match='could not find the "nope" function'):
        context.batch("abc", "strip|nope")

    with pytest.raises(TemplateError, match='could not find the "__len__" function'):
        context.batch("abc", "__len__")


def test_function_registration_errors(engine):
    engine.register_function("shout", str.upper)

    with pytest.raises(ConfigurationError, match="already registered"):
        engine.register_function("shout", str.upper)
    with pytest.raises(ConfigurationError, match="not a valid function name"):
        engine.register_function("not valid", str.upper)
    with pytest.raises(ConfigurationError, match="is not callable"):
        engine.register_function("value", "nope")

    engine.drop_function("shout")
    assert not engine.does_function_exist("shout")
    with pytest.raises(ConfigurationError, match="was not found"):
        engine.get_function("shout")


def test_extension_functions_see_the_calling_template(engine):
    engine.load_extensions([Greeter()])

    assert engine.render(UsesGreeter(), {"greeting": "Yo"}) == "Yo Bob"
    assert engine.render(UsesGreeter()) == "Hi Bob"


def test_extension_releases_the_template_after_the_call(engine):
    greeter = Greeter()
    engine.load_extension(greeter)

    engine.render(UsesGreeter(), {"greeting": "Yo"})

    assert greeter.template is None


def test_extension_template_is_restored_after_a_failing_call(engine):
    class Failing(Extension):
        def register(self, engine):
            engine.register_function("fail", self.fail)

        def fail(self):
            assert self.template is not None
            raise ValueError("failed")

    failing = Failing()
    engine.load_extension(failing)

    with pytest.raises(ValueError, match="failed"):
        engine.render(Script(lambda context: context.call("fail")))

    assert failing.template is None


def test_warm_and_clear_persistent_cache(tmp_path):
    engine = Engine(EngineConfig(cache_dir=tmp_path))

    engine.warm_cache([Hello, NeedsApp])
    assert len(list(tmp_path.glob("stratum_*.json"))) == 2

    engine.clear_cache()
    assert not list(tmp_path.glob("stratum_*.json"))


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STRATUM_TEMPLATE_DIR", str(tmp_path))
    monkeypatch.setenv("STRATUM_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("STRATUM_FILE_EXTENSION", "tpl")

    config = EngineConfig.from_env()

    assert config.directory == tmp_path
    assert config.cache_dir == tmp_path / "cache"
    assert config.file_extension == "tpl"
    assert Engine().get_file_extension() == "tpl"


def test_config_defaults(monkeypatch):
    for name in ("STRATUM_TEMPLATE_DIR", "STRATUM_CACHE_DIR", "STRATUM_FILE_EXTENSION"):
        monkeypatch.delenv(name, raising=False)

    config = EngineConfig.from_env()

    assert config == EngineConfig(directory=None, cache_dir=None, file_extension="html")
