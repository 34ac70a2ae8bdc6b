"""Example usage of the typed_records library."""

from typed_records import MemoryStorage, MethodFieldDefinition, Record, TypeParser


class Person:
    def __init__(self, first: str, last: str, active: bool = True) -> None:
        self.first = first
        self.last = last
        self.active = active

    def getFullName(self) -> str:
        return f"{self.first} {self.last}"

    def isActive(self, field: MethodFieldDefinition) -> bool:
        return self.active


# Define record types using the DSL; the class binding must be importable
types = """
type Person = "__main__.Person" {
    first: text,
    last: text,
    full_name: text via getFullName,
    active: boolean via isActive,
    index by_name (last, full_name)
}
index everyone (full_name)
"""

environment = TypeParser().parse_environment(types)
person_type = environment.registry.get_or_raise("Person")

print("Fields:")
for field in person_type.fields + person_type.methods:
    print(f"  {field.internal_name:<12} {field.get_display_name()}")

storage = MemoryStorage(environment)
people = [Person("Alice", "Smith"), Person("Bob", "Jones", active=False)]
records = [Record(person_type, p) for p in people]
for record in records:
    storage.save(record)

print("\nIndex 'everyone':")
for record_id, values in storage.index_entries("everyone").items():
    print(f"  {record_id}: {values}")

# Changing an input of a method field refreshes the indexes that cover it
people[0].last = "Johnson"
records[0].changed("full_name")

print("\nAfter rename:")
for record_id, values in storage.index_entries("by_name").items():
    print(f"  {record_id}: {values}")
