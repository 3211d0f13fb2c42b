"""Stratum template composition engine.

Stratum renders view trees built from plain Python objects. A template unit is
any object whose class defines ``__call__``; its own data lives in ordinary
attributes (dataclasses work well), and the services it needs are declared as
annotated slots that the engine injects before each render. There is no
template language to compile: render bodies are Python, and composition is
just one unit rendering another.

Key Features:
    - Declarative dependency injection with ``Annotated[T, Inject()]``
    - Binding discovery cached in memory and, optionally, on disk
    - Automatic HTML escaping of injected strings and explicit value wrappers
    - Exception-safe output capture that never leaks partial output
    - Legacy sections and chained layouts

Basic Usage:
    >>> from dataclasses import dataclass
    >>> from typing import Annotated
    >>> from stratum.domain import Inject
    >>> from stratum.engine import Engine
    >>> from stratum.template import TemplateUnit, injected
    >>>
    >>> @dataclass
    ... class Hello(TemplateUnit):
    ...     name: str
    ...     greeting: Annotated[str, Inject(escape=True)] = injected()
    ...
    ...     def __call__(self):
    ...         return f"{self.greeting}, {self.e(self.name)}!"
    >>>
    >>> engine = Engine().add_global("greeting", "Hello")
    >>> engine.render(Hello(name="<World>"))
    'Hello, &lt;World&gt;!'

The package consists of several modules:
    - engine: The Engine entry point (render, make, globals, caches, functions)
    - template: The TemplateUnit base class
    - registry: Binding discovery and caching
    - injector: Injection of bindings and invocation of render bodies
    - context: Per-render state, output capture, sections and layouts
    - sections: The section state machine
    - values: Text, Html, Attr, Js and Slot value wrappers
    - discovery: Template names, folders, themes and path resolution
    - domain: Core domain models (Binding, Inject)
    - errors: Engine-specific exceptions
"""
