## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from dataclasses import dataclass, field

from .types import Definition, CompiledPhrase, Instruction, SpecialForm


@dataclass
class Dictionary:
    """Append-only list of definitions; later definitions shadow earlier ones of the same name,
    while phrases compiled before a redefinition keep calling the body they captured.
    """
    definitions: list[Definition] = field(default_factory=list)

    # Registration helpers
    def define(self, name: str, body: SpecialForm | CompiledPhrase) -> Definition:
        definition = Definition(name=name, body=body)
        self.definitions.append(definition)
        return definition

    def define_phrase(self, name: str, *instructions: Instruction) -> Definition:
        return self.define(name, CompiledPhrase(tuple(instructions)))

    def define_special_form(self, form: SpecialForm) -> Definition:
        return self.define(form.value, form)

    # Lookup
    def lookup(self, name: str) -> Definition | None:
        for definition in reversed(self.definitions):
            if definition.name == name:
                return definition
        return None

    def is_special_form(self, name: str) -> bool:
        return (definition := self.lookup(name)) is not None and definition.is_special_form

    def names(self) -> list[str]:
        seen = {}
        for definition in reversed(self.definitions):
            seen.setdefault(definition.name, definition)
        return list(seen)

    def __len__(self):
        return len(self.definitions)
