"""
Lua Runtime Support Library
===========================

Fixed block of Lua helpers prepended to every transpiled program. It
implements the PSC abstract data types on plain Lua tables:

- Linked list: ``{val, suc}`` node chains; the empty list is ``nil``.
  Positions are 0-based integers walked from the head, so positional access
  is O(n).
- Symmetric list: ``{__psc_type = "listesym", head, tail}`` container with
  ``{val, suc, prec}`` nodes; positions are the nodes themselves.
- Stack and queue: arrays tagged ``__psc_type = "pile"`` / ``"file"``,
  mutated in place.
- Associative table: ``{__psc_type = "table", _data = {}}``.

plus the serializer behind ``écrire``, console input and integer file
handles.

Every helper is a ``local`` of the chunk and is defined before its first
caller, so the prelude never reaches a global by accident.
"""

import re


LUA_RUNTIME = r"""-- PSC runtime
local __psc_file_handles = {}
local __psc_file_current_handle = 1

-- =============================================================================
-- Files
-- =============================================================================

local function __psc_fichierOuvrir(nomFichier, mode)
    mode = mode or "r"
    local file, err = io.open(nomFichier, mode)
    if not file then
        print("Erreur d'ouverture du fichier: " .. tostring(err))
        return nil
    end
    local handle = __psc_file_current_handle
    __psc_file_handles[handle] = file
    __psc_file_current_handle = __psc_file_current_handle + 1
    return handle
end

local function __psc_fichierCreer(nomFichier)
    return __psc_fichierOuvrir(nomFichier, "w")
end

local function __psc_fichierEcrire(handle, value)
    if __psc_file_handles[handle] then
        __psc_file_handles[handle]:write(tostring(value))
    end
end

local function __psc_fichierFermer(handle)
    if __psc_file_handles[handle] then
        __psc_file_handles[handle]:close()
        __psc_file_handles[handle] = nil
    end
end

local function __psc_fichierLire(handle)
    if __psc_file_handles[handle] then
        return __psc_file_handles[handle]:read()
    end
    return nil
end

local function __psc_fichierFin(handle)
    local file = __psc_file_handles[handle]
    if file then
        local pos = file:seek()
        local probe = file:read(0)
        file:seek("set", pos)
        return probe == nil
    end
    return true
end

local function __psc_chaineVersEntier(chaine)
    return tonumber(chaine) or 0
end

-- =============================================================================
-- Console input
-- =============================================================================

local function __psc_lire()
    local line = io.read()
    if line == nil then return nil end
    local number = tonumber(line)
    if number ~= nil then return number end
    return line
end

local function __psc_lire_chaine()
    return io.read() or ""
end

-- =============================================================================
-- Serialization
-- =============================================================================

local function __psc_sorted_keys(t)
    local keys = {}
    for k in pairs(t) do
        keys[#keys + 1] = k
    end
    table.sort(keys, function(a, b) return tostring(a) < tostring(b) end)
    return keys
end

local function __psc_is_array(t)
    local count = 0
    for k in pairs(t) do
        if type(k) ~= 'number' then return false end
        count = count + 1
    end
    return count == #t
end

local function __psc_is_liste(t)
    return type(t) == 'table' and rawget(t, '__psc_type') == nil
        and (t.val ~= nil or t.suc ~= nil)
end

local function __psc_serialize(v)
    if type(v) == 'table' then
        local kind = rawget(v, '__psc_type')
        local parts = {}
        if kind == 'pile' or kind == 'file' then
            for i = 1, #v do
                parts[#parts + 1] = __psc_serialize(v[i])
            end
            local label = kind == 'pile' and 'Pile' or 'File'
            return label .. '[' .. table.concat(parts, ', ') .. ']'
        elseif kind == 'table' then
            for _, k in ipairs(__psc_sorted_keys(v._data)) do
                parts[#parts + 1] = __psc_serialize(k) .. ' → ' .. __psc_serialize(v._data[k])
            end
            return 'Table(' .. table.concat(parts, ', ') .. ')'
        elseif kind == 'listesym' then
            local node = v.head
            while node ~= nil do
                parts[#parts + 1] = __psc_serialize(node.val)
                node = node.suc
            end
            return 'LS(' .. table.concat(parts, ', ') .. ')'
        elseif __psc_is_liste(v) then
            local node = v
            while node ~= nil do
                parts[#parts + 1] = __psc_serialize(node.val)
                node = node.suc
            end
            return '(' .. table.concat(parts, ', ') .. ')'
        elseif __psc_is_array(v) then
            for i = 1, #v do
                parts[#parts + 1] = __psc_serialize(v[i])
            end
            return '[' .. table.concat(parts, ', ') .. ']'
        end
        for _, k in ipairs(__psc_sorted_keys(v)) do
            parts[#parts + 1] = tostring(k) .. ':' .. __psc_serialize(v[k])
        end
        return '{' .. table.concat(parts, ', ') .. '}'
    elseif type(v) == 'boolean' then
        return v and 'Vrai' or 'Faux'
    end
    return tostring(v)
end

local function __psc_write(...)
    local n = select('#', ...)
    local args = {...}
    local parts = {}
    for i = 1, n do
        parts[i] = __psc_serialize(args[i])
    end
    print(table.concat(parts, ''))
end

-- =============================================================================
-- Linked list (0-based integer places)
-- =============================================================================

local function __psc_liste_node(l, p)
    local node = l
    local i = p or 0
    while node ~= nil and i > 0 do
        node = node.suc
        i = i - 1
    end
    return node
end

local function __psc_liste_tete(l)
    return 0
end

local function __psc_liste_val(l, p)
    local node = __psc_liste_node(l, p)
    if node == nil then return nil end
    return node.val
end

local function __psc_liste_suc(l, p)
    return (p or 0) + 1
end

local function __psc_liste_fin(l, p)
    return __psc_liste_node(l, p) == nil
end

local function __psc_liste_vide()
    return nil
end

local function __psc_liste_ajout_tete(l, v)
    return { val = v, suc = l }
end

local function __psc_liste_suppression_tete(l)
    if l == nil then return nil end
    return l.suc
end

local function __psc_liste_ajout_queue(l, v)
    if l == nil then
        return { val = v, suc = nil }
    end
    local node = l
    while node.suc ~= nil do
        node = node.suc
    end
    node.suc = { val = v, suc = nil }
    return l
end

local function __psc_liste_suppression_queue(l)
    if l == nil or l.suc == nil then return nil end
    local node = l
    while node.suc.suc ~= nil do
        node = node.suc
    end
    node.suc = nil
    return l
end

local function __psc_liste_ajout(l, p, v)
    if l == nil then
        return { val = v, suc = nil }
    end
    local node = __psc_liste_node(l, p)
    if node ~= nil then
        node.suc = { val = v, suc = node.suc }
    end
    return l
end

local function __psc_liste_suppression(l, p)
    if l == nil then return nil end
    local i = p or 0
    if i <= 0 then
        return l.suc
    end
    local prev = __psc_liste_node(l, i - 1)
    if prev ~= nil and prev.suc ~= nil then
        prev.suc = prev.suc.suc
    end
    return l
end

local function __psc_liste_change(l, p, v)
    local node = __psc_liste_node(l, p)
    if node ~= nil then
        node.val = v
    end
    return l
end

local function __psc_liste_from_table(t)
    local l = __psc_liste_vide()
    if type(t) ~= 'table' then return l end
    for i = #t, 1, -1 do
        l = __psc_liste_ajout_tete(l, t[i])
    end
    return l
end

-- =============================================================================
-- Symmetric list (node places)
-- =============================================================================

local function __psc_listesym_vide()
    return { __psc_type = "listesym", head = nil, tail = nil }
end

local function __psc_listesym_tete(l)
    return l.head
end

local function __psc_listesym_queue(l)
    return l.tail
end

local function __psc_listesym_val(l, p)
    if p then return p.val end
    return nil
end

local function __psc_listesym_suc(l, p)
    if p then return p.suc end
    return nil
end

local function __psc_listesym_prec(l, p)
    if p then return p.prec end
    return nil
end

local function __psc_listesym_fin(l, p)
    return p == nil
end

local function __psc_listesym_ajout_tete(l, v)
    local node = { val = v, suc = l.head, prec = nil }
    if l.head then
        l.head.prec = node
    else
        l.tail = node
    end
    l.head = node
end

local function __psc_listesym_suppression_tete(l)
    if l.head then
        l.head = l.head.suc
        if l.head then
            l.head.prec = nil
        else
            l.tail = nil
        end
    end
end

local function __psc_listesym_ajout_queue(l, v)
    local node = { val = v, suc = nil, prec = l.tail }
    if l.tail then
        l.tail.suc = node
    else
        l.head = node
    end
    l.tail = node
end

local function __psc_listesym_suppression_queue(l)
    if l.tail then
        l.tail = l.tail.prec
        if l.tail then
            l.tail.suc = nil
        else
            l.head = nil
        end
    end
end

local function __psc_listesym_ajout(l, p, v)
    if p == nil then
        __psc_listesym_ajout_queue(l, v)
        return
    end
    local node = { val = v, suc = p, prec = p.prec }
    if p.prec then
        p.prec.suc = node
    else
        l.head = node
    end
    p.prec = node
end

local function __psc_listesym_suppression(l, p)
    if p == nil then return end
    if p.prec then
        p.prec.suc = p.suc
    else
        l.head = p.suc
    end
    if p.suc then
        p.suc.prec = p.prec
    else
        l.tail = p.prec
    end
end

local function __psc_listesym_change(l, p, v)
    if p then p.val = v end
end

local function __psc_listesym_from_table(t)
    local l = __psc_listesym_vide()
    if type(t) ~= 'table' then return l end
    for i = 1, #t do
        __psc_listesym_ajout_queue(l, t[i])
    end
    return l
end

-- =============================================================================
-- Stack
-- =============================================================================

local function __psc_pile_vide()
    return { __psc_type = "pile" }
end

local function __psc_pile_sommet(p)
    if type(p) ~= 'table' or #p == 0 then return nil end
    return p[#p]
end

local function __psc_pile_est_vide(p)
    return type(p) ~= 'table' or #p == 0
end

local function __psc_pile_empiler(p, v)
    if type(p) == 'table' then
        table.insert(p, v)
    end
end

local function __psc_pile_depiler(p)
    if type(p) == 'table' and #p > 0 then
        return table.remove(p)
    end
    return nil
end

local function __psc_pile_from_values(t)
    local p = __psc_pile_vide()
    for i = 1, #t do
        p[i] = t[i]
    end
    return p
end

-- =============================================================================
-- Queue
-- =============================================================================

local function __psc_file_vide()
    return { __psc_type = "file" }
end

local function __psc_file_est_vide(f)
    return type(f) ~= 'table' or #f == 0
end

local function __psc_file_enfiler(f, v)
    if type(f) == 'table' then
        table.insert(f, v)
    end
end

local function __psc_file_defiler(f)
    if type(f) == 'table' and #f > 0 then
        return table.remove(f, 1)
    end
    return nil
end

local function __psc_file_premier(f)
    if type(f) == 'table' and #f > 0 then
        return f[1]
    end
    return nil
end

local function __psc_file_from_values(t)
    local f = __psc_file_vide()
    for i = 1, #t do
        f[i] = t[i]
    end
    return f
end

local function __psc_generic_tete(obj)
    if obj == nil or __psc_is_liste(obj) then
        return __psc_liste_tete(obj)
    elseif type(obj) == 'table' then
        return obj[1]
    end
    return nil
end

-- =============================================================================
-- Associative table
-- =============================================================================

local function __psc_table_vide()
    return { __psc_type = "table", _data = {} }
end

local function __psc_table_from_pairs(...)
    local t = __psc_table_vide()
    local n = select('#', ...)
    local args = {...}
    for i = 1, n - 1, 2 do
        t._data[args[i]] = args[i + 1]
    end
    return t
end

local function __psc_table_domaine(t)
    return __psc_sorted_keys(t._data)
end

local function __psc_table_acces(t, k)
    return t._data[k]
end

local function __psc_table_ajout(t, k, v)
    t._data[k] = v
    return t
end

local function __psc_table_suppression(t, k)
    t._data[k] = nil
    return t
end

local function __psc_table_change(t, k, v)
    if t._data[k] ~= nil then
        t._data[k] = v
    end
    return t
end

-- estDans(x, E): x is an element of the collection E
local function __psc_ensemble_estdans(x, e)
    if type(e) ~= 'table' then return false end
    local kind = rawget(e, '__psc_type')
    if kind == 'table' then
        return e._data[x] ~= nil
    elseif kind == 'listesym' then
        local node = e.head
        while node ~= nil do
            if node.val == x then return true end
            node = node.suc
        end
        return false
    elseif __psc_is_liste(e) then
        local node = e
        while node ~= nil do
            if node.val == x then return true end
            node = node.suc
        end
        return false
    end
    for i = 1, #e do
        if e[i] == x then return true end
    end
    return false
end

-- End of PSC runtime
"""

LOCAL_FUNCTION_PATTERN = re.compile(r"^local function (\w+)\(", re.MULTILINE)


def defined_helpers(runtime: str = LUA_RUNTIME) -> set[str]:
    """Names of the helper functions defined by a runtime prelude."""
    return set(LOCAL_FUNCTION_PATTERN.findall(runtime))
