"""Tests for Resource declaration, inheritance and the serialization pipeline."""

from dataclasses import dataclass
from dataclasses import field

import pytest

from serialite.cache.store import MemoryCacheStore
from serialite.exceptions import CircularReferenceError
from serialite.exceptions import DuplicateKeyError
from serialite.exceptions import UnresolvedAccessorError
from serialite.exceptions import UnsupportedAttributeTypeError
from serialite.resource import Resource
from serialite.resource import derive_key
from serialite.settings import SerialiteSettings
from serialite.settings import set_global_settings


@dataclass
class User:
    id: int
    first_name: str
    last_name: str
    email: str = "user@example.com"
    version: int = 1
    friends: list = field(default_factory=list)

    def cache_key_with_version(self):
        return f"users/{self.id}-{self.version}"


class UserResource(Resource):
    @classmethod
    def define(cls, schema):
        schema.attributes("id", "first_name", "last_name")


class AdminResource(UserResource, key="admin"):
    @classmethod
    def define(cls, schema):
        schema.attributes("email").ignoring("last_name")


class TestDeclaration:
    """Tests for subclass declaration and schema inheritance."""

    def test_subclass_extends_parent_schema(self):
        """A subclass starts from its parent's attributes."""
        assert AdminResource.schema.attribute_names == ["id", "first_name", "email"]
        assert AdminResource.schema.root_key == "admin"

    def test_parent_unaffected_by_subclass(self):
        """Subclass declarations do not change the parent."""
        assert UserResource.schema.attribute_names == ["id", "first_name", "last_name"]
        assert UserResource.schema.root_key is None

    def test_mutating_parent_after_declaration(self):
        """Later changes to the parent do not reach existing subclasses, and vice versa."""

        class BaseResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attributes("id")

        class ChildResource(BaseResource):
            pass

        BaseResource.schema.attributes("name")
        ChildResource.schema.attributes("email").ignoring("id")

        assert BaseResource.schema.attribute_names == ["id", "name"]
        assert ChildResource.schema.attribute_names == ["email"]

    def test_subclass_without_define_does_not_rerun_parent_define(self):
        """Inherited define functions are not re-applied to subclasses."""

        class BaseResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attributes("id", "name")

        class ChildResource(BaseResource):
            pass

        ChildResource.schema.ignoring("name")

        class GrandChildResource(ChildResource):
            pass

        assert GrandChildResource.schema.attribute_names == ["id"]

    def test_class_parameters(self):
        """Class parameters set resource-wide options."""

        class PostResource(Resource, transform_keys="camel", cache_key=lambda obj: None):
            pass

        assert PostResource.schema.key_transform == "camel"
        assert PostResource.schema.cache_key_func is not None

    def test_class_parameters_override_inherited_options(self):
        """A subclass can clear an inherited key transform."""

        class CamelResource(Resource, transform_keys="camel"):
            pass

        class PlainResource(CamelResource, transform_keys=None):
            pass

        assert CamelResource.schema.key_transform == "camel"
        assert PlainResource.schema.key_transform is None


class TestClassLevelDeclaration:
    """Tests for declaring attributes through Resource classmethods."""

    def test_builder_classmethods_forward_to_schema(self):
        """Classmethods modify the class's own schema and chain."""

        class PostResource(Resource):
            pass

        PostResource.attributes("id", "title", "body").ignoring("body").transform_keys("camel")

        assert PostResource.schema.attribute_names == ["id", "title"]
        assert PostResource.schema.key_transform == "camel"
        assert Resource.schema.attribute_names == []

    def test_attribute_classmethod(self):
        """Computed attributes can be declared directly or with the decorator form."""

        class PostResource(Resource):
            pass

        PostResource.attribute("upper", lambda resource, obj: obj["title"].upper())

        @PostResource.attribute
        def length(resource, obj):
            return len(obj["title"])

        assert length.__name__ == "length"
        assert PostResource({"title": "abc"}).serializable_hash() == {"upper": "ABC", "length": 3}

    def test_association_classmethods(self):
        """one/many and their has_ aliases declare associations."""

        class TagResource(Resource):
            pass

        TagResource.attributes("name")

        class PostResource(Resource):
            pass

        PostResource.has_many("tags", resource=TagResource).has_one("main_tag", resource=TagResource)

        post = {"tags": [{"name": "a"}], "main_tag": {"name": "a"}}
        assert PostResource(post).serializable_hash() == {
            "tags": [{"name": "a"}],
            "main_tag": {"name": "a"},
        }

    def test_serializer_classmethod(self):
        """The formatting strategy can be set after class creation."""
        from serialite.serializers import Serializer

        class DataSerializer(Serializer, key="data"):
            pass

        class PostResource(Resource):
            pass

        PostResource.attributes("id").serializer(DataSerializer)
        assert PostResource({"id": 1}).serialize() == '{"data":{"id":1}}'


class TestSerializableHash:
    """Tests for serializable_hash() on single objects and collections."""

    def test_single_object(self):
        """A single object produces one ordered dict."""
        result = UserResource(User(1, "Ada", "Lovelace")).serializable_hash()
        assert result == {"id": 1, "first_name": "Ada", "last_name": "Lovelace"}
        assert list(result) == ["id", "first_name", "last_name"]

    def test_to_hash_alias(self):
        """to_hash is an alias of serializable_hash."""
        resource = UserResource(User(1, "Ada", "Lovelace"))
        assert resource.to_hash() == resource.serializable_hash()

    def test_collection(self):
        """A collection produces a list of dicts in order."""
        users = [User(1, "Ada", "Lovelace"), User(2, "Alan", "Turing")]
        assert UserResource(users).serializable_hash() == [
            {"id": 1, "first_name": "Ada", "last_name": "Lovelace"},
            {"id": 2, "first_name": "Alan", "last_name": "Turing"},
        ]

    def test_empty_collection(self):
        """An empty collection produces an empty list."""
        assert UserResource([]).serializable_hash() == []

    def test_mapping_is_single_object(self):
        """Mappings are serialized as one object read by key."""
        data = {"id": 1, "first_name": "Ada", "last_name": "Lovelace", "extra": True}
        assert UserResource(data).serializable_hash() == {
            "id": 1,
            "first_name": "Ada",
            "last_name": "Lovelace",
        }

    def test_overwrite_keeps_position(self):
        """Re-declaring an accessor as computed keeps the key where it was."""

        class PostResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attributes("id", "title", "body")
                schema.attribute("title", lambda resource, obj: obj.title.upper())

        post = {"id": 1, "title": "hello", "body": "text"}
        result = PostResource(post).serializable_hash()
        assert list(result) == ["id", "title", "body"]
        assert result["title"] == "HELLO"

    def test_key_transform_applies_to_output_keys(self):
        """The schema's key transform renames every output key."""

        class CamelUserResource(UserResource, transform_keys="lower_camel"):
            pass

        result = CamelUserResource(User(1, "Ada", "Lovelace")).serializable_hash()
        assert list(result) == ["id", "firstName", "lastName"]

    def test_transform_key_override(self):
        """Subclasses may override transform_key()."""

        class UpperResource(UserResource):
            def transform_key(self, key):
                return key.upper()

        result = UpperResource(User(1, "Ada", "Lovelace")).serializable_hash()
        assert list(result) == ["ID", "FIRST_NAME", "LAST_NAME"]

    def test_leading_underscore_keeps_keys_distinct(self):
        """Keys differing only by leading underscores stay separate after transformation."""

        class IdResource(Resource, transform_keys="snake"):
            @classmethod
            def define(cls, schema):
                schema.attributes("_id", "id")

        assert IdResource({"_id": 1, "id": 2}).serializable_hash() == {"_id": 1, "id": 2}

    def test_colliding_output_keys_raise(self):
        """Two attributes transformed onto the same output key raise instead of dropping one."""

        class CollidingResource(Resource, transform_keys="snake"):
            @classmethod
            def define(cls, schema):
                schema.attributes("user_name", "userName")

        with pytest.raises(DuplicateKeyError, match="'user_name'"):
            CollidingResource({"user_name": "a", "userName": "b"}).serializable_hash()

    def test_computed_receives_resource_and_object(self):
        """Computed functions get the bound resource and the target object."""
        received = []

        class NameResource(Resource):
            @classmethod
            def define(cls, schema):
                @schema.attribute
                def full_name(resource, obj):
                    received.append((resource, obj))
                    return f"{resource.params.get('title', '')}{obj.first_name} {obj.last_name}"

        user = User(1, "Ada", "Lovelace")
        resource = NameResource(user, params={"title": "Dr. "})

        assert resource.serializable_hash() == {"full_name": "Dr. Ada Lovelace"}
        assert received == [(resource, user)]

    def test_computed_can_use_resource_helpers(self):
        """Computed functions can call helper methods on the resource."""

        class GreetingResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attribute("greeting", lambda resource, obj: resource.greet(obj))

            def greet(self, obj):
                return f"Hello, {obj.first_name}"

        assert GreetingResource(User(1, "Ada", "L")).serializable_hash() == {
            "greeting": "Hello, Ada"
        }

    def test_missing_accessor_raises(self):
        """A declared accessor absent on the object is fatal."""

        class PhoneResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attributes("id", "phone")

        with pytest.raises(UnresolvedAccessorError, match="'phone'"):
            PhoneResource(User(1, "Ada", "Lovelace")).serializable_hash()

    def test_unsupported_slot_raises(self):
        """A slot of an unknown type is reported with its key and type."""

        class BrokenResource(Resource):
            pass

        BrokenResource.schema.slots["oops"] = 42

        with pytest.raises(UnsupportedAttributeTypeError, match="'oops': int"):
            BrokenResource(User(1, "Ada", "Lovelace")).serializable_hash()

    def test_params_are_read_only(self):
        """Params can not be modified through the resource."""
        resource = UserResource(User(1, "Ada", "Lovelace"), params={"a": 1})
        with pytest.raises(TypeError):
            resource.params["a"] = 2  # type: ignore[index]


class TestCycles:
    """Tests for circular object graphs."""

    @staticmethod
    def friend_resource():
        class FriendResource(Resource):
            @classmethod
            def define(cls, schema):
                schema.attributes("id")
                schema.many("friends", resource=cls)

        return FriendResource

    def test_cycle_raises(self):
        """A cyclic graph raises CircularReferenceError."""
        ada = User(1, "Ada", "Lovelace")
        alan = User(2, "Alan", "Turing")
        ada.friends = [alan]
        alan.friends = [ada]

        with pytest.raises(CircularReferenceError, match="'friends'"):
            self.friend_resource()(ada).serializable_hash()

    def test_shared_object_is_not_a_cycle(self):
        """The same object reached twice through siblings serializes twice."""
        ada = User(1, "Ada", "Lovelace")
        alan = User(2, "Alan", "Turing")
        ada.friends = [alan, alan]

        assert self.friend_resource()(ada).serializable_hash() == {
            "id": 1,
            "friends": [{"id": 2, "friends": []}, {"id": 2, "friends": []}],
        }

    def test_detection_can_be_disabled(self):
        """Without detection a cycle recurses until the recursion limit."""
        set_global_settings(SerialiteSettings(detect_cycles=False))
        ada = User(1, "Ada", "Lovelace")
        ada.friends = [ada]

        with pytest.raises(RecursionError):
            self.friend_resource()(ada).serializable_hash()


class TestCaching:
    """Tests for cache integration in serializable_hash()."""

    @pytest.fixture
    def store(self):
        store = MemoryCacheStore()
        set_global_settings(SerialiteSettings(cache=store))
        return store

    def test_null_cache_bypasses(self):
        """With the default null cache no key is derived."""
        assert UserResource(User(1, "Ada", "Lovelace")).cache_key() is None

    def test_versioned_object_is_cached(self, store):
        """Objects with a versioned identity are cached."""
        calls = []

        class CountingResource(UserResource):
            @classmethod
            def define(cls, schema):
                schema.attribute("calls", lambda resource, obj: calls.append(obj) or len(calls))

        user = User(1, "Ada", "Lovelace")
        first = CountingResource(user).serializable_hash()
        user.first_name = "Changed"
        second = CountingResource(user).serializable_hash()

        assert first == second
        assert first["first_name"] == "Ada"
        assert len(calls) == 1
        assert len(store) == 1

    def test_new_version_recomputes(self, store):
        """A changed versioned identity produces a new cache key."""
        user = User(1, "Ada", "Lovelace")
        UserResource(user).serializable_hash()
        user.first_name = "Augusta"
        user.version = 2
        assert UserResource(user).serializable_hash()["first_name"] == "Augusta"

    def test_unversioned_object_is_not_cached(self, store):
        """Objects without a versioned identity bypass the cache."""
        data = {"id": 1, "first_name": "Ada", "last_name": "Lovelace"}
        assert UserResource(data).cache_key() is None
        UserResource(data).serializable_hash()
        assert len(store) == 0

    def test_schema_cache_key_function(self, store):
        """A schema cache key function takes precedence over the object's own."""

        class DictUserResource(UserResource, cache_key=lambda obj: f"dict/{obj['id']}"):
            pass

        data = {"id": 1, "first_name": "Ada", "last_name": "Lovelace"}
        assert DictUserResource(data).cache_key() is not None
        DictUserResource(data).serializable_hash()
        assert len(store) == 1

    def test_keys_differ_by_resource_and_params(self, store):
        """The cache key includes the resource class and params."""
        user = User(1, "Ada", "Lovelace")
        keys = {
            UserResource(user).cache_key(),
            AdminResource(user).cache_key(),
            UserResource(user, params={"a": 1}).cache_key(),
        }
        assert len(keys) == 3

    def test_errors_are_not_cached(self, store):
        """A failing computation stores nothing."""

        class FailingResource(UserResource):
            @classmethod
            def define(cls, schema):
                schema.attribute("boom", lambda resource, obj: 1 / 0)

        with pytest.raises(ZeroDivisionError):
            FailingResource(User(1, "Ada", "Lovelace")).serializable_hash()
        assert len(store) == 0


class TestKey:
    """Tests for root key derivation."""

    def test_derived_key(self):
        """The key is derived from the class name without the Resource suffix."""
        assert UserResource(None).key == "user"

    def test_declared_key(self):
        """A declared key wins over the derived one."""
        assert AdminResource(None).key == "admin"

    def test_nested_and_compound_names(self):
        """Nested class names are joined and each segment is lower-cased as a whole."""

        class Admin:
            class BlogPostResource(Resource):
                pass

        assert derive_key(Admin.BlogPostResource) == "admin_blogpost"

    def test_name_without_suffix(self):
        """Classes without the Resource suffix keep their whole name."""

        class Serializer(Resource):
            pass

        assert derive_key(Serializer) == "serializer"
