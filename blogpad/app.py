# blogpad/app.py
from __future__ import annotations
from datetime import datetime
from functools import lru_cache
from typing import Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from . import config
from .errors import PersistError
from .models import Blog
from .services import BlogStore, open_store

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="blogpad API")


@lru_cache(maxsize=1)
def get_store() -> BlogStore:
    return open_store()

# ---------- Schemas ----------
class BlogIn(BaseModel):
    title: str
    content: str
    tags: str = ""  # comma separated, as typed

class BlogOut(BaseModel):
    id: int
    title: str
    content: str
    tags: list[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    created_display: str
    updated_display: str

def _to_out(b: Blog) -> BlogOut:
    return BlogOut(
        id=b.id, title=b.title, content=b.content, tags=list(b.tags),
        created_at=b.created_at, updated_at=b.updated_at,
        created_display=b.formatted_created_at(),
        updated_display=b.formatted_updated_at(),
    )

def _clean(payload: BlogIn) -> tuple[str, str, str]:
    title, content = payload.title.strip(), payload.content.strip()
    if not title or not content:
        raise HTTPException(status_code=400, detail="Title and content are required")
    return title, content, payload.tags.strip()


@app.exception_handler(PersistError)
def _persist_failed(request: Request, exc: PersistError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})

# ---------- API ----------
@app.get("/api/blogs", response_model=list[BlogOut])
def api_list_blogs(tag: Optional[str] = None, store: BlogStore = Depends(get_store)):
    store.sort_by_recency()
    return [_to_out(b) for b in store.filter_by_tag((tag or "").strip())]

@app.post("/api/blogs", response_model=BlogOut, status_code=201)
def api_create_blog(payload: BlogIn, store: BlogStore = Depends(get_store)):
    title, content, tags = _clean(payload)
    return _to_out(store.create(title, content, tags))

@app.get("/api/blogs/{blog_id}", response_model=BlogOut)
def api_get_blog(blog_id: int, store: BlogStore = Depends(get_store)):
    b = store.get(blog_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return _to_out(b)

@app.put("/api/blogs/{blog_id}", response_model=BlogOut)
def api_update_blog(blog_id: int, payload: BlogIn, store: BlogStore = Depends(get_store)):
    title, content, tags = _clean(payload)
    b = store.update(blog_id, title, content, tags)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return _to_out(b)

@app.delete("/api/blogs/{blog_id}")
def api_delete_blog(blog_id: int, store: BlogStore = Depends(get_store)):
    return {"ok": True, "deleted": store.delete(blog_id)}

@app.get("/api/tags", response_model=list[str])
def api_tags(store: BlogStore = Depends(get_store)):
    return store.all_tags()

# ---------- Tiny UI (single file, no build) ----------
_INDEX = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>blogpad</title>
  <style>
    body { font-family: system-ui, sans-serif; max-width: 760px; margin: 2rem auto; padding: 0 1rem; color: #111827; }
    input, textarea { width: 100%; box-sizing: border-box; padding: 8px; margin: 4px 0 10px;
                      border: 1px solid #cbd5e1; border-radius: 8px; font: inherit; }
    textarea { height: 8rem; }
    .btn { padding: 8px 12px; border-radius: 8px; border: 1px solid #cbd5e1; background: #fff; cursor: pointer; }
    .btn-primary { background: #0b5cff; color: #fff; border-color: #0b5cff; }
    .btn-delete { background: #ffe3e3; border-color: #fecaca; }
    .hidden { display: none; }
    .search { display: flex; gap: 8px; align-items: center; margin: 1.5rem 0; }
    .search input { margin: 0; }
    .blog-post { border: 1px solid #e2e8f0; border-radius: 12px; padding: 12px 16px; margin-bottom: 12px; }
    .blog-date { color: #64748b; }
    .blog-tags { color: #7c3aed; margin: 6px 0; }
  </style>
</head>
<body>
  <h1>blogpad</h1>

  <form id="blog-form">
    <h2 id="form-title">New blog</h2>
    <input type="hidden" id="edit-id"/>
    <input id="title" placeholder="Title"/>
    <textarea id="content" placeholder="Content"></textarea>
    <input id="tags" placeholder="tags (comma, separated)"/>
    <button class="btn btn-primary" type="submit">Save</button>
    <button class="btn hidden" type="button" id="cancel-btn">Cancel</button>
  </form>

  <div class="search">
    <input id="search-tag" placeholder="Filter by tag"/>
    <button class="btn" id="search-btn">Search</button>
  </div>

  <div id="blog-list"></div>

  <script>
    const $ = (sel) => document.querySelector(sel);
    function escapeHtml(s){ return String(s ?? '').replace(/[&<>"']/g, c=>({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c])); }
    async function j(url, opts={}){
      const res = await fetch(url, {headers:{'content-type':'application/json'}, ...opts});
      if(!res.ok){
        let text = await res.text().catch(()=>res.statusText);
        try{ const d=JSON.parse(text); text=d.detail||text }catch{}
        throw new Error(text || res.statusText);
      }
      return res.json();
    }

    let blogs = [];

    async function render(tag=''){
      const params = new URLSearchParams();
      if(tag) params.set('tag', tag);
      blogs = await j('/api/blogs?'+params.toString());
      $('#blog-list').innerHTML = blogs.map(b => `
        <div class="blog-post">
          <h2>${escapeHtml(b.title)}</h2>
          <div class="blog-date">
            <small>Written: ${escapeHtml(b.created_display)}</small><br>
            <small>Last updated: ${escapeHtml(b.updated_display)}</small>
          </div>
          <div class="blog-tags">${b.tags.map(t => '#'+escapeHtml(t)).join(' ')}</div>
          <p>${escapeHtml(b.content)}</p>
          <button class="btn" onclick="editBlog(${b.id})">Edit</button>
          <button class="btn btn-delete" onclick="deleteBlog(${b.id})">Delete</button>
        </div>`).join('');
    }

    function resetForm(){
      $('#blog-form').reset();
      $('#edit-id').value = '';
      $('#form-title').textContent = 'New blog';
      $('#cancel-btn').classList.add('hidden');
    }

    function editBlog(id){
      const b = blogs.find(x => x.id === id); if(!b) return;
      $('#title').value = b.title;
      $('#content').value = b.content;
      $('#tags').value = b.tags.join(', ');
      $('#edit-id').value = b.id;
      $('#form-title').textContent = 'Edit blog';
      $('#cancel-btn').classList.remove('hidden');
      window.scrollTo(0, 0);
    }

    async function deleteBlog(id){
      if(!confirm('Delete this blog?')) return;
      await j(`/api/blogs/${id}`, {method:'DELETE'});
      render();
    }

    $('#blog-form').addEventListener('submit', async (e)=>{
      e.preventDefault();
      const body = {title: $('#title').value.trim(), content: $('#content').value.trim(), tags: $('#tags').value.trim()};
      if(!body.title || !body.content) return;
      const editId = parseInt($('#edit-id').value);
      try{
        if(editId){ await j(`/api/blogs/${editId}`, {method:'PUT', body: JSON.stringify(body)}); }
        else { await j('/api/blogs', {method:'POST', body: JSON.stringify(body)}); }
      }catch(err){ alert(err.message); return; }
      resetForm();
      render();
    });
    $('#search-btn').addEventListener('click', ()=> render($('#search-tag').value.trim()));
    $('#cancel-btn').addEventListener('click', resetForm);

    render();
  </script>
</body>
</html>
"""


@app.get("/", response_class=HTMLResponse)
def index():
    return HTMLResponse(content=_INDEX)
