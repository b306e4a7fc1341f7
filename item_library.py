"""
Saved items: the generator's output kept between sessions.

The library is one JSON document, {"items": [record, ...]}, where a record is

    {"id", "name", "category", "code", "analysis", "meta",
     "createdAt", "updatedAt"}

`code` holds the part-list payload (a list, a {"components": [...]}
document, or its JSON text). Only that payload matters to the compiler.
"""
import json
import os
import time
from datetime import datetime, timezone

import config
import logutil
from asset_compiler import compile_parts, load_parts


def _now():
    return datetime.now(timezone.utc).isoformat()


def new_record(name, code, category='misc', analysis=None, meta=None, item_id=None):
    return {
        'id': item_id or f"item_{int(time.time() * 1000)}",
        'name': name,
        'category': category or 'misc',
        'code': code,
        'analysis': analysis,
        'meta': meta or {},
        'createdAt': None,
        'updatedAt': None,
    }


def record_parts(record):
    """ The raw part list stored on a record. """
    payload = record.get('code')
    if payload is None:
        payload = record.get('parts')
    return load_parts(payload)


def compile_record(record, scale=None):
    scale = config.ITEM_SCALE if scale is None else scale
    return compile_parts(record_parts(record), scale=scale, name=record.get('name', ''))


class ItemLibrary:
    def __init__(self, path=None):
        self.path = path or config.ITEM_LIBRARY_PATH
        self._cache = None

    def _load(self):
        if self._cache is not None:
            return self._cache
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict) or not isinstance(data.get('items'), list):
                raise ValueError("missing 'items' list")
        except FileNotFoundError:
            data = {'items': []}
        except ValueError as e:
            logutil.log("ITEMS", f"library {self.path} unreadable ({e}); starting empty", level="WARN")
            data = {'items': []}
        self._cache = data
        return data

    def _write(self, data):
        """ Replace the file, then the cache; a failed write leaves both as they were. """
        tmp = f"{self.path}.tmp"
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)
        self._cache = data

    def items(self):
        return list(self._load()['items'])

    def get(self, item_id):
        for item in self._load()['items']:
            if item.get('id') == item_id:
                return item
        raise KeyError(item_id)

    def save(self, record):
        """ Insert or replace by id. Returns the stored record. """
        if not record.get('name') or record.get('code') is None:
            raise ValueError("item needs a name and code")
        data = self._load()
        now = _now()
        item = dict(record)
        item['id'] = item.get('id') or f"item_{int(time.time() * 1000)}"
        item['category'] = item.get('category') or 'misc'
        item['createdAt'] = item.get('createdAt') or now
        item['updatedAt'] = now
        items = list(data['items'])
        for i, existing in enumerate(items):
            if existing.get('id') == item['id']:
                items[i] = item
                break
        else:
            items.append(item)
        self._write(dict(data, items=items))
        logutil.log("ITEMS", f"saved {item['id']} ({item['name']})")
        return item

    def delete(self, item_id):
        data = self._load()
        items = [i for i in data['items'] if i.get('id') != item_id]
        deleted = len(data['items']) - len(items)
        self._write(dict(data, items=items))
        return deleted
